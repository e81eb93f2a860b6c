# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Acceptance tests for the vertical-pod-autoscaler component.

This package deploys the component with atmos into an ephemeral Kubernetes
namespace, verifies the recommender becomes ready and the VPA CRDs accept
objects, checks for drift and tears everything down.
"""

from vpa_acceptance.config import ComponentRef, ReadinessConfig, SuiteConfig
from vpa_acceptance.orchestrator import BasicRunResult, ComponentSuite
from vpa_acceptance.provisioning import (
    AtmosProvisioner,
    DeploymentHandle,
    DriftDetectedError,
    ProvisioningError,
)
from vpa_acceptance.readiness import ReadinessTimeoutError

__all__ = [
    "AtmosProvisioner",
    "BasicRunResult",
    "ComponentRef",
    "ComponentSuite",
    "DeploymentHandle",
    "DriftDetectedError",
    "ProvisioningError",
    "ReadinessConfig",
    "ReadinessTimeoutError",
    "SuiteConfig",
]
