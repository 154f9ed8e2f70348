"""Pod manifest construction and submission."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from devpod_k8s.errors import ConfigError, CreateError
from devpod_k8s.infra import (
    ContainerSpec,
    KubectlError,
    PodAPI,
    PodConfig,
    SecurityContext,
    ServiceAccountAPI,
    ServiceAccountConfig,
    VolumeMountSpec,
)
from devpod_k8s.logging_schema import LogEvent
from devpod_k8s.models import ImageDetails, MergedDevContainerConfig, Mount, MountType
from devpod_k8s.runtimes.kubernetes.entrypoint import get_container_entrypoint_and_args
from devpod_k8s.runtimes.kubernetes.parsing import parse_labels, parse_resources

if TYPE_CHECKING:
    from devpod_k8s.config import KubernetesConfig
    from devpod_k8s.runtimes.kubernetes.naming import ResourceNaming

logger = logging.getLogger(__name__)


class PodPlan(BaseModel):
    """A pod ready to submit plus the mounts to seed on first run."""

    pod: PodConfig
    copy_mounts: list[Mount]


class PodBuilder:
    """Translates devcontainer configuration into a pod manifest.

    Every mount lives on the workspace PVC under its own sub-path: the
    workspace mount takes slot 0 and each declared mount the next slot.
    Named volume mounts use their source name instead of the slot.
    """

    def __init__(
        self,
        config: KubernetesConfig,
        naming: ResourceNaming,
        pods: PodAPI | None = None,
        service_accounts: ServiceAccountAPI | None = None,
    ) -> None:
        self._config = config
        self._naming = naming
        self._pods = pods or PodAPI()
        self._service_accounts = service_accounts or ServiceAccountAPI()

    def volume_mount(self, slot: int, mount: Mount) -> VolumeMountSpec:
        source = mount.source if mount.type == MountType.VOLUME else ""
        return VolumeMountSpec(
            name=self._naming.volume_name,
            mount_path=mount.target,
            sub_path=self._naming.sub_path(slot, source),
        )

    def node_selector(self) -> dict[str, str]:
        """Parse the configured node selector.

        Raises:
            ConfigError: The selector is malformed.
        """
        if not self._config.node_selector:
            return {}
        try:
            return parse_labels(self._config.node_selector)
        except ValueError as e:
            raise ConfigError("parsing node selector", detail=str(e)) from e

    def validate(self, workspace_mount: str) -> Mount:
        """Check the pod inputs without touching the cluster.

        Returns:
            The parsed workspace mount.

        Raises:
            ConfigError: Empty workspace mount target or bad node selector.
        """
        mount = Mount.parse(workspace_mount)
        if not mount.target:
            raise ConfigError("workspace mount target is empty")
        self.node_selector()
        return mount

    async def build(
        self,
        identity: str,
        merged_config: MergedDevContainerConfig,
        image_name: str,
        workspace_mount: str,
        image_details: ImageDetails,
    ) -> PodPlan:
        """Build the pod for an identity.

        Configuration is validated before the only remote call (service
        account creation) is made.

        Raises:
            ConfigError: Empty workspace mount target or bad node selector.
            CreateError: The service account could not be created.
        """
        mount = self.validate(workspace_mount)
        node_selector = self.node_selector()

        copy_mounts = [mount]
        volume_mounts = [self.volume_mount(0, mount)]
        for slot, declared in enumerate(merged_config.mounts, start=1):
            match declared.type:
                case MountType.BIND:
                    copy_mounts.append(declared)
                    volume_mounts.append(self.volume_mount(slot, declared))
                case MountType.VOLUME:
                    volume_mounts.append(self.volume_mount(slot, declared))
                case _:
                    logger.warning(
                        "Unsupported mount type '%s' in mount '%s', will skip",
                        declared.type,
                        declared,
                        extra={"event": LogEvent.MOUNT_SKIPPED, "pod": identity},
                    )

        service_account = self._config.service_account
        if service_account:
            try:
                await self._service_accounts.create(
                    ServiceAccountConfig(name=service_account, labels=self._naming.owner_labels)
                )
            except KubectlError as e:
                raise CreateError("create service account", detail=e.output) from e
            logger.debug(
                "Service account ready",
                extra={"event": LogEvent.SERVICE_ACCOUNT_CREATED, "service_account": service_account},
            )

        entrypoint, args = get_container_entrypoint_and_args(merged_config, image_details)
        container = ContainerSpec(
            name=self._naming.container_name,
            image=image_name,
            command=[entrypoint],
            args=args,
            env=dict(merged_config.container_env),
            volume_mounts=volume_mounts,
            resources=parse_resources(self._config.resources),
            # Always root; capabilities and privileged are layered on top
            security_context=SecurityContext(
                run_as_user=0,
                run_as_group=0,
                run_as_non_root=False,
                privileged=merged_config.privileged,
                capabilities_add=merged_config.cap_add,
            ),
        )
        pod = PodConfig(
            name=identity,
            labels=self._naming.owner_labels,
            service_account=service_account,
            containers=[container],
            volume_name=self._naming.volume_name,
            claim_name=identity,
            node_selector=node_selector,
        )
        return PodPlan(pod=pod, copy_mounts=copy_mounts)

    async def submit(self, pod: PodConfig) -> str:
        """Create the pod.

        Raises:
            CreateError: The cluster rejected the pod; carries kubectl's output.
        """
        logger.info(
            "Create Pod '%s'",
            pod.name,
            extra={"event": LogEvent.POD_CREATED, "pod": pod.name},
        )
        try:
            return await self._pods.create(pod)
        except KubectlError as e:
            raise CreateError("create pod", detail=e.output) from e
