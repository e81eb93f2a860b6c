# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
VerticalPodAutoscaler objects created through the generic custom objects API.

The VPA CRDs are installed by the component under test, so there is no
typed model for them; objects are plain dicts addressed by
group/version/plural. Creating one proves the CRDs are registered.
"""

import logging
from typing import Any, Dict

from kubernetes_asyncio import client

logger = logging.getLogger(__name__)

VPA_GROUP = "autoscaling.k8s.io"
VPA_VERSION = "v1"
VPA_PLURAL = "verticalpodautoscalers"
VPA_KIND = "VerticalPodAutoscaler"

# Recommendation only: the autoscaler never evicts or resizes the target
UPDATE_MODE_OFF = "Off"


def vpa_name(app_name: str) -> str:
    return f"{app_name}-vpa"


def build_vpa_manifest(
    namespace: str, app_name: str, update_mode: str = UPDATE_MODE_OFF
) -> Dict[str, Any]:
    return {
        "apiVersion": f"{VPA_GROUP}/{VPA_VERSION}",
        "kind": VPA_KIND,
        "metadata": {
            "name": vpa_name(app_name),
            "namespace": namespace,
        },
        "spec": {
            "targetRef": {
                "apiVersion": "apps/v1",
                "kind": "Deployment",
                "name": app_name,
            },
            "updatePolicy": {
                "updateMode": update_mode,
            },
        },
    }


async def create_vpa_resource(
    custom_api: client.CustomObjectsApi, namespace: str, app_name: str
) -> Dict[str, Any]:
    created = await custom_api.create_namespaced_custom_object(
        group=VPA_GROUP,
        version=VPA_VERSION,
        namespace=namespace,
        plural=VPA_PLURAL,
        body=build_vpa_manifest(namespace, app_name),
    )
    logger.info(f"Created VPA {vpa_name(app_name)} in {namespace}")
    return created


async def get_vpa_resource(
    custom_api: client.CustomObjectsApi, namespace: str, app_name: str
) -> Dict[str, Any]:
    return await custom_api.get_namespaced_custom_object(
        group=VPA_GROUP,
        version=VPA_VERSION,
        namespace=namespace,
        plural=VPA_PLURAL,
        name=vpa_name(app_name),
    )


async def verify_vpa_resource_exists(
    custom_api: client.CustomObjectsApi, namespace: str, app_name: str
) -> Dict[str, Any]:
    """Fetch the VPA back and check it kept the requested name and namespace."""
    expected_name = vpa_name(app_name)
    vpa = await get_vpa_resource(custom_api, namespace, app_name)

    assert vpa, f"VPA {expected_name} not returned by the API server"
    metadata = vpa.get("metadata", {})
    assert metadata.get("name") == expected_name, (
        f"Expected VPA name '{expected_name}', got '{metadata.get('name')}'"
    )
    assert metadata.get("namespace") == namespace, (
        f"Expected VPA namespace '{namespace}', got '{metadata.get('namespace')}'"
    )

    logger.info(f"VPA resource {expected_name} created successfully")
    return vpa


async def cleanup_vpa_resource(
    custom_api: client.CustomObjectsApi, namespace: str, app_name: str
) -> None:
    """Delete the VPA; failures are logged, never raised."""
    name = vpa_name(app_name)
    try:
        await custom_api.delete_namespaced_custom_object(
            group=VPA_GROUP,
            version=VPA_VERSION,
            namespace=namespace,
            plural=VPA_PLURAL,
            name=name,
        )
        logger.info(f"Deleted VPA {name}")
    except Exception as e:
        logger.warning(f"Error deleting VPA resource {name}: {e}")
