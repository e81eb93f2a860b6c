# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import secrets
import string
from dataclasses import dataclass
from typing import Iterable, Optional

from kubernetes_asyncio import client

UNIQUE_ID_ALPHABET = string.ascii_lowercase + string.digits
UNIQUE_ID_LENGTH = 6


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the acceptance tool.

    Args:
        verbose: If True, set log level to DEBUG; otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # The kubernetes client logs every request at DEBUG
    logging.getLogger("kubernetes_asyncio").setLevel(logging.WARNING)


def generate_unique_id(length: int = UNIQUE_ID_LENGTH) -> str:
    """Random lowercase token, safe for use in Kubernetes resource names."""
    return "".join(secrets.choice(UNIQUE_ID_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class RunIdentity:
    """Names derived from one random id, shared by every resource of a run."""

    random_id: str
    namespace_prefix: str = "vpa"

    @classmethod
    def generate(cls, namespace_prefix: str = "vpa") -> "RunIdentity":
        return cls(random_id=generate_unique_id(), namespace_prefix=namespace_prefix)

    @property
    def namespace(self) -> str:
        return f"{self.namespace_prefix}-{self.random_id}"

    @property
    def app_name(self) -> str:
        return f"test-app-{self.random_id}"


def find_deployment_by_name_suffix(
    deployments: Iterable[client.V1Deployment], suffix: str
) -> Optional[client.V1Deployment]:
    """Return the first deployment whose name ends with suffix.

    Controller names are generated from the release name, so only the
    suffix is stable.
    """
    for deployment in deployments:
        if deployment.metadata.name.endswith(suffix):
            return deployment
    return None
