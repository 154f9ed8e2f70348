"""Dev container lifecycle on Kubernetes.

First run (no volume):  create PVC + snapshot -> create pod -> wait -> seed
Restart (volume found): create pod from the snapshot -> wait

Every step runs in order on the calling task. A failure aborts the run
and leaves whatever was created in place, so retrying with the same
identity picks up from the existing volume.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from devpod_k8s.errors import VolumeNotFoundError
from devpod_k8s.infra import KubectlError, NamespaceAPI, PodAPI
from devpod_k8s.logging_schema import LogEvent
from devpod_k8s.models import (
    ContainerInfo,
    DevContainerConfig,
    ImageDetails,
    MergedDevContainerConfig,
)
from devpod_k8s.runtimes.kubernetes.result import (
    DevContainerStatus,
    OperationResult,
    OperationStatus,
)

if TYPE_CHECKING:
    from devpod_k8s.config import KubernetesConfig
    from devpod_k8s.runtimes.kubernetes.naming import ResourceNaming
    from devpod_k8s.runtimes.kubernetes.pod import PodBuilder
    from devpod_k8s.runtimes.kubernetes.readiness import ReadinessWaiter
    from devpod_k8s.runtimes.kubernetes.seeder import DataSeeder
    from devpod_k8s.runtimes.kubernetes.volume import VolumeManager

logger = logging.getLogger(__name__)


class KubernetesDriver:
    """Runs and restarts a single dev container pod."""

    def __init__(
        self,
        config: KubernetesConfig,
        naming: ResourceNaming,
        volumes: VolumeManager,
        builder: PodBuilder,
        waiter: ReadinessWaiter,
        seeder: DataSeeder,
        pods: PodAPI | None = None,
        namespaces: NamespaceAPI | None = None,
    ) -> None:
        self._config = config
        self._naming = naming
        self._volumes = volumes
        self._builder = builder
        self._waiter = waiter
        self._seeder = seeder
        self._pods = pods or PodAPI()
        self._namespaces = namespaces or NamespaceAPI()

    def get_id(self, labels: list[str]) -> str:
        return self._naming.identity(labels)

    async def run_dev_container(
        self,
        parsed_config: DevContainerConfig,
        merged_config: MergedDevContainerConfig,
        image_name: str,
        workspace_mount: str,
        labels: list[str],
        image_details: ImageDetails,
    ) -> None:
        """Create or recreate the dev container for a workspace.

        The first run creates the volume, records the configuration
        snapshot and seeds local data. Later runs reuse the volume and
        never seed again.
        """
        identity = self.get_id(labels)
        # Invalid input must never reach the write-once snapshot
        self._builder.validate(workspace_mount)

        if self._config.namespace and self._config.create_namespace:
            await self._ensure_namespace(self._config.namespace)

        initialize = False
        lookup = await self._volumes.lookup(identity)
        if not lookup.found:
            info = ContainerInfo(
                parsed_config=parsed_config,
                merged_config=merged_config,
                image_details=image_details,
                image_name=image_name,
                workspace_mount=workspace_mount,
                labels=labels,
            )
            await self._volumes.create(identity, info)
            initialize = True

        await self._run_container(
            identity,
            parsed_config,
            merged_config,
            image_name,
            workspace_mount,
            image_details,
            initialize,
        )

    async def start_dev_container(self, identity: str, labels: list[str]) -> None:
        """Recreate the pod from the stored snapshot.

        Raises:
            ConfigError: The node selector or the stored workspace mount is invalid.
            VolumeNotFoundError: No volume with a snapshot exists for identity.
        """
        self._builder.node_selector()
        lookup = await self._volumes.lookup(identity)
        if lookup.info is None:
            raise VolumeNotFoundError(f"persistent volume '{identity}' not found")

        info = lookup.info
        await self._run_container(
            identity,
            info.parsed_config,
            info.merged_config,
            info.image_name,
            info.workspace_mount,
            info.image_details,
            initialize=False,
        )

    async def stop_dev_container(self, identity: str) -> OperationResult:
        """Delete the pod, keeping the volume."""
        if not await self._pods.delete(identity):
            return OperationResult(
                status=OperationStatus.ALREADY_STOPPED,
                message="Pod does not exist",
            )
        logger.info("Pod deleted", extra={"event": LogEvent.POD_REMOVED, "pod": identity})
        return OperationResult(status=OperationStatus.COMPLETED)

    async def delete_dev_container(self, identity: str) -> OperationResult:
        """Delete the pod and then the volume with its snapshot."""
        pod_deleted = await self._pods.delete(identity)
        volume_deleted = await self._volumes.delete(identity)
        if not pod_deleted and not volume_deleted:
            return OperationResult(
                status=OperationStatus.ALREADY_DELETED,
                message="Dev container does not exist",
            )
        return OperationResult(status=OperationStatus.COMPLETED)

    async def find_dev_container(self, identity: str) -> DevContainerStatus | None:
        """Observe the pod and volume for an identity."""
        pod = await self._pods.get(identity)
        volume_exists = await self._volumes.exists(identity)
        if pod is None and not volume_exists:
            return None

        initialized = False
        if volume_exists:
            initialized = (await self._volumes.lookup(identity)).found

        phase = pod.get("status", {}).get("phase", "Unknown") if pod else "NotFound"
        return DevContainerStatus(
            id=identity,
            phase=phase,
            volume_exists=volume_exists,
            initialized=initialized,
        )

    async def _ensure_namespace(self, namespace: str) -> None:
        # Concurrent callers race to create the same namespace
        try:
            await self._namespaces.create(namespace)
            logger.debug(
                "Created namespace '%s'",
                namespace,
                extra={"event": LogEvent.NAMESPACE_CREATED, "namespace": namespace},
            )
        except KubectlError as e:
            logger.debug(
                "Error creating namespace: %s",
                e.output,
                extra={"event": LogEvent.NAMESPACE_FAILED, "namespace": namespace},
            )

    async def _run_container(
        self,
        identity: str,
        parsed_config: DevContainerConfig,
        merged_config: MergedDevContainerConfig,
        image_name: str,
        workspace_mount: str,
        image_details: ImageDetails,
        initialize: bool,
    ) -> None:
        plan = await self._builder.build(
            identity,
            merged_config,
            image_name,
            workspace_mount,
            image_details,
        )
        await self._builder.submit(plan.pod)
        await self._waiter.wait_running(identity)

        if initialize:
            await self._seeder.seed(identity, parsed_config.origin, plan.copy_mounts)
