# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Fakes shared by the unit tests: deployments, API clients, provisioner."""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

from vpa_acceptance.provisioning import (
    DeploymentHandle,
    DriftDetectedError,
    ProvisioningError,
)

CLUSTER_ID = "eg-test-eks-cluster"


def make_deployment(
    name: str, replicas: Optional[int] = 1, ready: Optional[int] = None
) -> SimpleNamespace:
    """Stand-in for V1Deployment with only the fields the harness reads."""
    return SimpleNamespace(
        metadata=SimpleNamespace(name=name),
        spec=SimpleNamespace(replicas=replicas),
        status=SimpleNamespace(ready_replicas=ready),
    )


def release_metadata(release_namespace: str, **overrides: Any) -> Dict[str, Any]:
    metadata = {
        "app_version": "1.2.1",
        "chart": "vpa",
        "first_deployed": 1735689600,
        "last_deployed": 1735689600,
        "name": "vpa",
        "namespace": release_namespace,
        "notes": "",
        "revision": 1,
        "values": '{"recommender":{"enabled":true}}',
        "version": "4.7.1",
    }
    metadata.update(overrides)
    return metadata


class FakeProvisioner:
    """Records every call in a shared event list."""

    def __init__(self, events: List[Tuple]):
        self.events = events
        self.metadata_overrides: Dict[str, Any] = {}
        self.fail_deploy = False
        self.fail_destroy_for: set = set()
        self.drift = False
        self.resources: List[str] = []

    async def output(self, component: str, stack: str, key: str) -> str:
        self.events.append(("output", component, key))
        return CLUSTER_ID

    async def deploy(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]] = None
    ) -> DeploymentHandle:
        self.events.append(("deploy", component, inputs))
        if self.fail_deploy:
            raise ProvisioningError(["atmos", "terraform", "apply"], 1, "apply failed")
        namespace = (inputs or {}).get("kubernetes_namespace", "")
        return DeploymentHandle(
            component=component,
            stack=stack,
            inputs=dict(inputs or {}),
            outputs={"metadata": release_metadata(namespace, **self.metadata_overrides)},
        )

    async def destroy(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]] = None
    ) -> None:
        self.events.append(("destroy", component))
        if component in self.fail_destroy_for:
            raise ProvisioningError(["atmos", "terraform", "destroy"], 1, "destroy failed")

    async def drift_check(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]] = None
    ) -> None:
        self.events.append(("drift", component))
        if self.drift:
            raise DriftDetectedError(["atmos", "terraform", "plan"], 2, "1 to change")

    async def managed_resources(self, component: str, stack: str) -> List[str]:
        self.events.append(("resources", component))
        return list(self.resources)


def make_clients(events: List[Tuple], deployments: Optional[List[Any]] = None):
    """Fake KubernetesClients whose calls are appended to events."""
    if deployments is None:
        deployments = [
            make_deployment("vpa-admission-controller", ready=1),
            make_deployment("vpa-recommender", ready=1),
        ]
    by_name = {d.metadata.name: d for d in deployments}

    clients = MagicMock()
    clients.cluster_id = CLUSTER_ID

    async def close():
        events.append(("close",))

    async def list_deployments(namespace):
        events.append(("list", namespace))
        return SimpleNamespace(items=list(deployments))

    async def read_deployment(name, namespace):
        events.append(("read", name))
        return by_name[name]

    async def create_deployment(namespace, body):
        events.append(("create_deployment", body.metadata.name))
        return body

    async def delete_deployment(name, namespace):
        events.append(("delete_deployment", name))

    created: Dict[str, Dict[str, Any]] = {}

    async def create_vpa(group, version, namespace, plural, body):
        events.append(("create_vpa", body["metadata"]["name"]))
        created[body["metadata"]["name"]] = body
        return body

    async def get_vpa(group, version, namespace, plural, name):
        events.append(("get_vpa", name))
        return created[name]

    async def delete_vpa(group, version, namespace, plural, name):
        events.append(("delete_vpa", name))

    clients.close = AsyncMock(side_effect=close)
    clients.apps_v1 = MagicMock()
    clients.apps_v1.list_namespaced_deployment = AsyncMock(side_effect=list_deployments)
    clients.apps_v1.read_namespaced_deployment = AsyncMock(side_effect=read_deployment)
    clients.apps_v1.create_namespaced_deployment = AsyncMock(
        side_effect=create_deployment
    )
    clients.apps_v1.delete_namespaced_deployment = AsyncMock(
        side_effect=delete_deployment
    )
    clients.custom_objects = MagicMock()
    clients.custom_objects.create_namespaced_custom_object = AsyncMock(
        side_effect=create_vpa
    )
    clients.custom_objects.get_namespaced_custom_object = AsyncMock(
        side_effect=get_vpa
    )
    clients.custom_objects.delete_namespaced_custom_object = AsyncMock(
        side_effect=delete_vpa
    )
    return clients
