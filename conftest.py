# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Root conftest that applies to all tests in the repository.

Behavior:
- Registers the markers declared in pyproject.toml so the suite also runs
  from an installed copy without the ini file.
- Applies hierarchical cadence markers before marker filtering:
  pre_merge implies post_merge, and either implies nightly.
- VPA_DISABLE_MARKER_IMPLICATIONS=1 turns the implications off.
"""

import os
from typing import Sequence

import pytest

# Keep in sync with [tool.pytest.ini_options].markers in pyproject.toml
MARKERS = [
    "pre_merge: marks tests to run before merging",
    "post_merge: marks tests to run after merge",
    "nightly: marks tests to run nightly",
    "unit: marks tests as unit tests",
    "e2e: marks tests as end-to-end tests",
    "k8s: marks tests as requiring Kubernetes and atmos",
    "gpu_0: marks tests that don't require GPU",
]


def pytest_configure(config: pytest.Config) -> None:
    for marker in MARKERS:
        config.addinivalue_line("markers", marker)


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    session: pytest.Session, config: pytest.Config, items: Sequence[pytest.Item]
) -> None:
    if os.getenv("VPA_DISABLE_MARKER_IMPLICATIONS") == "1":
        return

    for item in items:
        marker_names = {m.name for m in item.iter_markers()}

        if "pre_merge" in marker_names and "post_merge" not in marker_names:
            item.add_marker("post_merge")
            marker_names.add("post_merge")

        if "post_merge" in marker_names and "nightly" not in marker_names:
            item.add_marker("nightly")
