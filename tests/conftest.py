# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import os

import pytest

from vpa_acceptance.config import SuiteConfig
from vpa_acceptance.provisioning import AtmosProvisioner

LOG_FORMAT = "[TEST] %(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt=DATE_FORMAT,  # ISO 8601 UTC format
)

DEFAULT_SUITE_CONFIG = os.path.join(os.path.dirname(__file__), "suite.yaml")


def pytest_addoption(parser: pytest.Parser) -> None:
    """Options for the live component tests."""
    group = parser.getgroup("vpa", "vertical-pod-autoscaler acceptance tests")
    group.addoption(
        "--suite-config",
        type=str,
        default=DEFAULT_SUITE_CONFIG,
        help="Suite definition YAML (components, stack, dependencies)",
    )
    group.addoption("--stack", type=str, default=None, help="Override the stack")
    group.addoption("--kubeconfig", type=str, default=None)
    group.addoption(
        "--kube-context",
        type=str,
        default=None,
        help="Kubeconfig context (default: matched from the cluster id)",
    )
    group.addoption(
        "--run-timeout",
        type=float,
        default=None,
        help="Outer deadline in seconds for the basic scenario",
    )
    group.addoption("--atmos-bin", type=str, default="atmos")
    group.addoption(
        "--atmos-base-path", type=str, default=None, help="Sets ATMOS_BASE_PATH"
    )
    # store_true with default None so an unset flag keeps the YAML value
    for flag in (
        "--skip-deploy-dependencies",
        "--skip-destroy-dependencies",
        "--skip-destroy-component",
    ):
        group.addoption(flag, action="store_true", default=None)


@pytest.fixture(autouse=True)
def logger(tmp_path):
    log_path = os.path.join(tmp_path, "test.log.txt")
    logger = logging.getLogger()
    handler = logging.FileHandler(log_path, mode="w")
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    yield
    handler.close()
    logger.removeHandler(handler)


@pytest.fixture(scope="session")
def suite_config(pytestconfig) -> SuiteConfig:
    path = pytestconfig.getoption("--suite-config")
    config = SuiteConfig.from_yaml(path) if path else SuiteConfig()
    return config.with_overrides(
        stack=pytestconfig.getoption("--stack"),
        kubeconfig=pytestconfig.getoption("--kubeconfig"),
        kube_context=pytestconfig.getoption("--kube-context"),
        run_timeout=pytestconfig.getoption("--run-timeout"),
        skip_deploy_dependencies=pytestconfig.getoption("--skip-deploy-dependencies"),
        skip_destroy_dependencies=pytestconfig.getoption(
            "--skip-destroy-dependencies"
        ),
        skip_destroy_component=pytestconfig.getoption("--skip-destroy-component"),
    )


@pytest.fixture(scope="session")
def atmos_provisioner(pytestconfig):
    provisioner = AtmosProvisioner(
        atmos_bin=pytestconfig.getoption("--atmos-bin"),
        base_path=pytestconfig.getoption("--atmos-base-path"),
    )
    yield provisioner
    provisioner.close()
