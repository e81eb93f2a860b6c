# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Configuration for the component acceptance suite.

Provides dataclasses describing which components to deploy, where, and how
long to wait for them, plus loading from a suite YAML file.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class ReadinessConfig:
    """
    Polling policy for the readiness wait.

    Attributes:
        interval: Seconds to sleep between checks
        attempts: Maximum number of checks before giving up
    """

    interval: float = 10.0
    attempts: int = 30

    @property
    def deadline(self) -> float:
        return self.interval * self.attempts


@dataclass
class ComponentRef:
    """A (component, stack, inputs) triple resolved through the provisioner."""

    component: str
    stack: str
    inputs: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_stack: str) -> "ComponentRef":
        if "component" not in data:
            raise ValueError(f"Dependency entry is missing 'component': {data}")
        return cls(
            component=data["component"],
            stack=data.get("stack", default_stack),
            inputs=data.get("inputs"),
        )


def _default_dependencies() -> List[ComponentRef]:
    return [
        ComponentRef("vpc", "default-test"),
        ComponentRef("eks/cluster", "default-test"),
    ]


@dataclass
class SuiteConfig:
    """
    Settings for a full acceptance run.

    Attributes:
        stack: Stack every component is deployed under
        component: Component under test
        disabled_component: Variant of the component with enabled=false
        dependencies: Ordered cluster-level prerequisites
        cluster_component: Dependency whose outputs identify the cluster
        cluster_id_output: Output key holding the cluster id
        namespace_prefix: Prefix of the generated namespace name
        namespace_input: Input override key carrying the namespace
        expected_chart: Chart name the release metadata must report
        recommender_suffix: Name suffix of the deployment to wait on
        kubeconfig: Optional kubeconfig path
        kube_context: Optional kubeconfig context (overrides cluster matching)
        readiness: Polling policy for the readiness wait
        run_timeout: Optional outer deadline in seconds for one scenario
        skip_deploy_dependencies: Assume dependencies are already deployed
        skip_destroy_dependencies: Leave dependencies in place after the suite
        skip_destroy_component: Leave the component in place after a scenario
    """

    stack: str = "default-test"
    component: str = "eks/vertical-pod-autoscaler/basic"
    disabled_component: str = "eks/vertical-pod-autoscaler/disabled"
    dependencies: List[ComponentRef] = field(default_factory=_default_dependencies)
    cluster_component: str = "eks/cluster"
    cluster_id_output: str = "eks_cluster_id"
    namespace_prefix: str = "vpa"
    namespace_input: str = "kubernetes_namespace"
    expected_chart: str = "vpa"
    recommender_suffix: str = "recommender"
    kubeconfig: Optional[str] = None
    kube_context: Optional[str] = None
    readiness: ReadinessConfig = field(default_factory=ReadinessConfig)
    run_timeout: Optional[float] = None
    skip_deploy_dependencies: bool = False
    skip_destroy_dependencies: bool = False
    skip_destroy_component: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SuiteConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown suite config keys: {sorted(unknown)}")

        values = dict(data)
        stack = values.get("stack", cls.stack)
        if "dependencies" in values:
            values["dependencies"] = [
                ComponentRef.from_dict(dep, stack)
                for dep in values["dependencies"] or []
            ]
        if "readiness" in values:
            values["readiness"] = ReadinessConfig(**(values["readiness"] or {}))
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str) -> "SuiteConfig":
        """Load a suite definition file"""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Suite config {path} must be a mapping")
        return cls.from_dict(data)

    def with_overrides(self, **overrides: Any) -> "SuiteConfig":
        """Return a copy with every override that is not None applied"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        new_stack = changes.get("stack")
        if new_stack and new_stack != self.stack and "dependencies" not in changes:
            # dependencies on the suite stack move with it
            changes["dependencies"] = [
                dataclasses.replace(dep, stack=new_stack)
                if dep.stack == self.stack
                else dep
                for dep in self.dependencies
            ]
        return dataclasses.replace(self, **changes)
