"""Kubernetes runtime for the driver."""

from devpod_k8s.config import DriverConfig, get_driver_config
from devpod_k8s.infra import (
    KubectlClient,
    NamespaceAPI,
    PodAPI,
    PvcAPI,
    ServiceAccountAPI,
)
from devpod_k8s.runtimes.kubernetes.driver import KubernetesDriver
from devpod_k8s.runtimes.kubernetes.naming import ResourceNaming
from devpod_k8s.runtimes.kubernetes.pod import PodBuilder, PodPlan
from devpod_k8s.runtimes.kubernetes.readiness import ReadinessWaiter
from devpod_k8s.runtimes.kubernetes.seeder import DataSeeder
from devpod_k8s.runtimes.kubernetes.snapshot import AnnotationSnapshotStore, SnapshotStore
from devpod_k8s.runtimes.kubernetes.volume import VolumeLookup, VolumeManager


def create_driver(config: DriverConfig | None = None) -> KubernetesDriver:
    """Wire a driver whose components share one kubectl client."""
    config = config or get_driver_config()
    kubectl = KubectlClient(config.kubernetes)
    naming = ResourceNaming(config.runtime)
    pods = PodAPI(kubectl)
    pvcs = PvcAPI(kubectl)

    return KubernetesDriver(
        config=config.kubernetes,
        naming=naming,
        volumes=VolumeManager(
            config.kubernetes,
            naming,
            api=pvcs,
            store=AnnotationSnapshotStore(naming, pvcs),
        ),
        builder=PodBuilder(
            config.kubernetes,
            naming,
            pods=pods,
            service_accounts=ServiceAccountAPI(kubectl),
        ),
        waiter=ReadinessWaiter(config.kubernetes, pods=pods),
        seeder=DataSeeder(naming.container_name, pods=pods),
        pods=pods,
        namespaces=NamespaceAPI(kubectl),
    )


__all__ = [
    "AnnotationSnapshotStore",
    "DataSeeder",
    "KubernetesDriver",
    "PodBuilder",
    "PodPlan",
    "ReadinessWaiter",
    "ResourceNaming",
    "SnapshotStore",
    "VolumeLookup",
    "VolumeManager",
    "create_driver",
]
