# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging

from kubernetes_asyncio import client
from kubernetes_asyncio.client import exceptions

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10
DEFAULT_POLL_ATTEMPTS = 30


class ReadinessTimeoutError(TimeoutError):
    def __init__(self, name: str, namespace: str, timeout: float):
        self.name = name
        self.namespace = namespace
        self.timeout = timeout
        super().__init__(
            f"Deployment {name} in namespace {namespace} did not become ready "
            f"within {timeout:g} seconds"
        )


def is_deployment_ready(deployment: client.V1Deployment) -> bool:
    desired = deployment.spec.replicas
    if desired is None:
        desired = 1  # API server default
    ready = deployment.status.ready_replicas if deployment.status else None
    return (ready or 0) == desired


async def wait_for_deployment_ready(
    apps_api: client.AppsV1Api,
    namespace: str,
    name: str,
    interval: float = DEFAULT_POLL_INTERVAL,
    attempts: int = DEFAULT_POLL_ATTEMPTS,
) -> None:
    """
    Block until the deployment reports as many ready replicas as it wants.

    A deployment that cannot be read yet counts as not ready; only running
    out of attempts is an error.

    Raises:
        ReadinessTimeoutError: If the deployment is not ready after all attempts
    """
    if not namespace:
        raise ValueError("namespace must not be empty")

    for attempt in range(1, attempts + 1):
        try:
            deployment = await apps_api.read_namespaced_deployment(name, namespace)
            if is_deployment_ready(deployment):
                logger.info(f"Deployment {name} ready after {attempt} check(s)")
                return
            ready = deployment.status.ready_replicas if deployment.status else 0
            logger.debug(
                f"[{attempt}/{attempts}] {name}: "
                f"{ready or 0}/{deployment.spec.replicas} ready"
            )
        except exceptions.ApiException as e:
            logger.debug(f"[{attempt}/{attempts}] {name}: not readable yet ({e.status})")
        await asyncio.sleep(interval)

    raise ReadinessTimeoutError(name, namespace, interval * attempts)
