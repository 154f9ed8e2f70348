"""Driver infrastructure layer."""

from devpod_k8s.infra.kubectl import (
    ContainerSpec,
    KubectlClient,
    KubectlError,
    NamespaceAPI,
    PodAPI,
    PodConfig,
    PvcAPI,
    PvcConfig,
    SecurityContext,
    ServiceAccountAPI,
    ServiceAccountConfig,
    VolumeMountSpec,
    get_kubectl_client,
)

__all__ = [
    "ContainerSpec",
    "KubectlClient",
    "KubectlError",
    "NamespaceAPI",
    "PodAPI",
    "PodConfig",
    "PvcAPI",
    "PvcConfig",
    "SecurityContext",
    "ServiceAccountAPI",
    "ServiceAccountConfig",
    "VolumeMountSpec",
    "get_kubectl_client",
]
