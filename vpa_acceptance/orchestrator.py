# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
End-to-end verification of the vertical-pod-autoscaler component.

``ComponentSuite.run_basic`` deploys the component into a fresh namespace,
checks the release metadata, waits for the recommender, proves the VPA CRDs
are usable by creating a VPA for a throwaway deployment, runs a drift check
and tears everything down again.

Cleanup is an ``AsyncExitStack``: the component destroy is registered
before the deploy starts and each ephemeral resource registers its own
cleanup once created, so a failure at any step unwinds everything created
before it, most recent first.
"""

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from vpa_acceptance.cluster import KubernetesClients, connect_to_cluster
from vpa_acceptance.config import ComponentRef, SuiteConfig
from vpa_acceptance.metadata import ReleaseMetadata
from vpa_acceptance.policy import (
    cleanup_vpa_resource,
    create_vpa_resource,
    verify_vpa_resource_exists,
)
from vpa_acceptance.provisioning import AtmosProvisioner, ProvisioningError
from vpa_acceptance.readiness import wait_for_deployment_ready
from vpa_acceptance.utils import RunIdentity, find_deployment_by_name_suffix
from vpa_acceptance.workload import cleanup_test_application, create_test_application

logger = logging.getLogger(__name__)

ClusterFactory = Callable[..., Awaitable[KubernetesClients]]


@dataclass
class BasicRunResult:
    identity: RunIdentity
    metadata: ReleaseMetadata
    recommender_name: str


@dataclass
class ComponentSuite:
    provisioner: AtmosProvisioner
    config: SuiteConfig = field(default_factory=SuiteConfig)
    cluster_factory: ClusterFactory = connect_to_cluster

    dependencies: List[ComponentRef] = field(default_factory=list)

    def __post_init__(self):
        if not self.dependencies:
            self.dependencies = list(self.config.dependencies)

    def add_dependency(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]] = None
    ) -> None:
        self.dependencies.append(ComponentRef(component, stack, inputs))

    # ----- Suite lifecycle -----

    async def setup_suite(self) -> None:
        """Deploy the cluster-level prerequisites, in declaration order."""
        if self.config.skip_deploy_dependencies:
            logger.info("Skipping dependency deployment")
            return
        for dep in self.dependencies:
            logger.info(f"Deploying dependency {dep.component} (stack {dep.stack})")
            await self.provisioner.deploy(dep.component, dep.stack, dep.inputs)

    async def teardown_suite(self) -> None:
        """Destroy the prerequisites in reverse order, attempting every one."""
        if self.config.skip_destroy_dependencies:
            logger.info("Skipping dependency teardown")
            return
        first_error: Optional[ProvisioningError] = None
        for dep in reversed(self.dependencies):
            try:
                await self.provisioner.destroy(dep.component, dep.stack, dep.inputs)
            except ProvisioningError as e:
                logger.error(f"Failed to destroy dependency {dep.component}: {e}")
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    # ----- Scenarios -----

    async def run_basic(self) -> BasicRunResult:
        if self.config.run_timeout is None:
            return await self._run_basic()
        return await asyncio.wait_for(
            self._run_basic(), timeout=self.config.run_timeout
        )

    async def _connect(self) -> KubernetesClients:
        cluster_id = await self.provisioner.output(
            self.config.cluster_component,
            self.config.stack,
            self.config.cluster_id_output,
        )
        return await self.cluster_factory(
            cluster_id,
            kubeconfig=self.config.kubeconfig,
            kube_context=self.config.kube_context,
        )

    def _register_destroy(self, exit_stack: AsyncExitStack, ref: ComponentRef) -> None:
        if self.config.skip_destroy_component:

            async def keep():
                logger.warning(
                    f"Leaving {ref.component} deployed (stack {ref.stack}, "
                    f"inputs {ref.inputs})"
                )

            exit_stack.push_async_callback(keep)
        else:
            exit_stack.push_async_callback(
                self.provisioner.destroy, ref.component, ref.stack, ref.inputs
            )

    async def _run_basic(self) -> BasicRunResult:
        cfg = self.config
        identity = RunIdentity.generate(cfg.namespace_prefix)
        namespace = identity.namespace
        ref = ComponentRef(cfg.component, cfg.stack, {cfg.namespace_input: namespace})

        async with AsyncExitStack() as exit_stack:
            # first in, last out: destroy runs after every other cleanup
            self._register_destroy(exit_stack, ref)

            clients = await self._connect()
            exit_stack.push_async_callback(clients.close)

            logger.info(f"Deploying {ref.component} into namespace {namespace}")
            handle = await self.provisioner.deploy(ref.component, ref.stack, ref.inputs)
            assert handle is not None, f"Deploying {ref.component} returned no outputs"

            metadata = ReleaseMetadata.from_output(handle.output_struct("metadata"))
            metadata.validate(cfg.expected_chart, namespace)
            logger.info(f"Release metadata: {metadata.summary()}")

            deployments = await clients.apps_v1.list_namespaced_deployment(namespace)
            assert deployments.items, f"No deployments found in namespace {namespace}"

            recommender = find_deployment_by_name_suffix(
                deployments.items, cfg.recommender_suffix
            )
            assert recommender is not None, (
                f"No deployment ending in '{cfg.recommender_suffix}' in {namespace}"
            )
            assert recommender.spec.replicas == 1, (
                f"Expected 1 replica for {recommender.metadata.name}, "
                f"got {recommender.spec.replicas}"
            )

            await wait_for_deployment_ready(
                clients.apps_v1,
                namespace,
                recommender.metadata.name,
                interval=cfg.readiness.interval,
                attempts=cfg.readiness.attempts,
            )

            app_name = identity.app_name
            await create_test_application(clients.apps_v1, namespace, app_name)
            exit_stack.push_async_callback(
                cleanup_test_application, clients.apps_v1, namespace, app_name
            )

            await create_vpa_resource(clients.custom_objects, namespace, app_name)
            exit_stack.push_async_callback(
                cleanup_vpa_resource, clients.custom_objects, namespace, app_name
            )

            await verify_vpa_resource_exists(clients.custom_objects, namespace, app_name)

            await self.drift_test(ref)

        return BasicRunResult(
            identity=identity,
            metadata=metadata,
            recommender_name=recommender.metadata.name,
        )

    async def drift_test(self, ref: ComponentRef) -> None:
        await self.provisioner.drift_check(ref.component, ref.stack, ref.inputs)

    async def run_enabled_flag(
        self,
        component: Optional[str] = None,
        stack: Optional[str] = None,
        inputs: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Deploy the component with enabled=false and check it created nothing."""
        ref = ComponentRef(
            component or self.config.disabled_component,
            stack or self.config.stack,
            {**(inputs or {}), "enabled": False},
        )

        async with AsyncExitStack() as exit_stack:
            self._register_destroy(exit_stack, ref)
            await self.provisioner.deploy(ref.component, ref.stack, ref.inputs)

            resources = await self.provisioner.managed_resources(
                ref.component, ref.stack
            )
            assert not resources, (
                f"Disabled component {ref.component} created resources: {resources}"
            )
            logger.info(f"Disabled component {ref.component} created no resources")
