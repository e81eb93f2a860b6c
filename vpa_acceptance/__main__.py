# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Entry point for running the acceptance suite as a module.

Usage:
    python -m vpa_acceptance <command> [options]

Commands:
    run      - Deploy dependencies, run both scenarios, tear down
    setup    - Deploy the suite dependencies only
    teardown - Destroy the suite dependencies only
"""

import sys

from vpa_acceptance.cli import main

if __name__ == "__main__":
    sys.exit(main())
