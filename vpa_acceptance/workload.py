# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Throwaway application the autoscaler policy can point at."""

import logging

from kubernetes_asyncio import client

logger = logging.getLogger(__name__)

TEST_IMAGE = "nginx:stable-alpine"
TEST_CONTAINER_NAME = "test-container"
TEST_RESOURCE_REQUESTS = {"cpu": "100m", "memory": "128Mi"}


def build_test_deployment(namespace: str, app_name: str) -> client.V1Deployment:
    # selector and template labels must match or the API server rejects the deployment
    labels = {"app": app_name}
    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(name=app_name, namespace=namespace),
        spec=client.V1DeploymentSpec(
            replicas=1,
            selector=client.V1LabelSelector(match_labels=dict(labels)),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=dict(labels)),
                spec=client.V1PodSpec(
                    containers=[
                        client.V1Container(
                            name=TEST_CONTAINER_NAME,
                            image=TEST_IMAGE,
                            resources=client.V1ResourceRequirements(
                                requests=dict(TEST_RESOURCE_REQUESTS)
                            ),
                        )
                    ]
                ),
            ),
        ),
    )


async def create_test_application(
    apps_api: client.AppsV1Api, namespace: str, app_name: str
) -> client.V1Deployment:
    body = build_test_deployment(namespace, app_name)
    created = await apps_api.create_namespaced_deployment(namespace, body)
    logger.info(f"Created test deployment {app_name} in {namespace}")
    return created


async def cleanup_test_application(
    apps_api: client.AppsV1Api, namespace: str, app_name: str
) -> None:
    """Delete the test deployment; failures are logged, never raised."""
    try:
        await apps_api.delete_namespaced_deployment(app_name, namespace)
        logger.info(f"Deleted test deployment {app_name}")
    except Exception as e:
        logger.warning(f"Error deleting test deployment {app_name}: {e}")
