# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from dataclasses import dataclass
from typing import Optional

from kubernetes_asyncio import client, config
from kubernetes_asyncio.config import ConfigException

logger = logging.getLogger(__name__)


@dataclass
class KubernetesClients:
    """Typed and generic API handles sharing one connection pool."""

    api_client: client.ApiClient
    apps_v1: client.AppsV1Api
    custom_objects: client.CustomObjectsApi
    cluster_id: Optional[str] = None

    @classmethod
    def from_api_client(
        cls, api_client: client.ApiClient, cluster_id: Optional[str] = None
    ) -> "KubernetesClients":
        return cls(
            api_client=api_client,
            apps_v1=client.AppsV1Api(api_client),
            custom_objects=client.CustomObjectsApi(api_client),
            cluster_id=cluster_id,
        )

    async def close(self) -> None:
        await self.api_client.close()


def find_context_for_cluster(
    cluster_id: str, kubeconfig: Optional[str] = None
) -> Optional[str]:
    """Name of the kubeconfig context pointing at cluster_id, if any.

    EKS contexts written by ``aws eks update-kubeconfig`` are named after the
    cluster ARN, which ends with ``/<cluster name>``.
    """
    try:
        contexts, _ = config.list_kube_config_contexts(config_file=kubeconfig)
    except (ConfigException, OSError) as e:
        logger.debug(f"Could not read kubeconfig contexts: {e}")
        return None

    for ctx in contexts or []:
        name = ctx["name"]
        cluster = (ctx.get("context") or {}).get("cluster") or ""
        for candidate in (name, cluster):
            if candidate == cluster_id or candidate.endswith(f"/{cluster_id}"):
                return name
    return None


async def connect_to_cluster(
    cluster_id: str,
    kubeconfig: Optional[str] = None,
    kube_context: Optional[str] = None,
) -> KubernetesClients:
    """Build API clients for the cluster identified by cluster_id."""
    configuration = client.Configuration()

    context = kube_context or find_context_for_cluster(cluster_id, kubeconfig)
    if context:
        logger.info(f"Using kubeconfig context {context} for cluster {cluster_id}")
        await config.load_kube_config(
            config_file=kubeconfig,
            context=context,
            client_configuration=configuration,
        )
    else:
        try:
            # Try in-cluster config first (for pods with service accounts)
            config.load_incluster_config(client_configuration=configuration)
            logger.info("Using in-cluster Kubernetes configuration")
        except ConfigException:
            logger.warning(
                f"No kubeconfig context matches cluster {cluster_id}, "
                "falling back to the current context"
            )
            await config.load_kube_config(
                config_file=kubeconfig, client_configuration=configuration
            )

    return KubernetesClients.from_api_client(
        client.ApiClient(configuration), cluster_id=cluster_id
    )
