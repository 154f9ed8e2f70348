"""Persistent volume manager for the Kubernetes runtime."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from devpod_k8s.errors import CreateError, VolumeLookupError
from devpod_k8s.infra import KubectlError, PvcAPI, PvcConfig
from devpod_k8s.logging_schema import LogEvent
from devpod_k8s.models import ContainerInfo
from devpod_k8s.runtimes.kubernetes.snapshot import AnnotationSnapshotStore, SnapshotStore

if TYPE_CHECKING:
    from devpod_k8s.config import KubernetesConfig
    from devpod_k8s.runtimes.kubernetes.naming import ResourceNaming

logger = logging.getLogger(__name__)


class VolumeLookup(BaseModel):
    info: ContainerInfo | None = None

    @property
    def found(self) -> bool:
        return self.info is not None


class VolumeManager:
    """Workspace PVC manager.

    The PVC outlives every pod and carries the container info snapshot
    written on first creation.
    """

    def __init__(
        self,
        config: KubernetesConfig,
        naming: ResourceNaming,
        api: PvcAPI | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        self._config = config
        self._naming = naming
        self._api = api or PvcAPI()
        self._store = store or AnnotationSnapshotStore(naming, self._api)

    async def lookup(self, identity: str) -> VolumeLookup:
        """Find the volume and its snapshot.

        A volume without a readable snapshot counts as not found.
        """
        info = await self._store.get(identity)
        if info is not None:
            logger.info(
                "Found existing volume",
                extra={"event": LogEvent.VOLUME_FOUND, "volume": identity},
            )
        return VolumeLookup(info=info)

    async def exists(self, identity: str) -> bool:
        try:
            return await self._api.get(identity) is not None
        except (KubectlError, ValueError) as e:
            raise VolumeLookupError(f"get persistent volume claim '{identity}'", detail=str(e)) from e

    async def create(self, identity: str, info: ContainerInfo) -> None:
        """Create the PVC and persist the snapshot.

        A PVC left behind by an earlier run that failed before writing its
        snapshot is reused. The snapshot write is write-once, so of two
        concurrent creators only one gets past it.
        """
        config = PvcConfig(
            name=identity,
            size=self._config.disk_size,
            labels=self._naming.owner_labels,
            storage_class=self._config.storage_class,
        )
        try:
            await self._api.create(config)
            logger.info(
                "Volume created",
                extra={"event": LogEvent.VOLUME_CREATED, "volume": identity, "size": config.size},
            )
        except KubectlError as e:
            if not e.already_exists:
                raise CreateError("create persistent volume claim", detail=e.output) from e
            logger.info(
                "Volume exists without container info, resuming",
                extra={"event": LogEvent.VOLUME_CREATED, "volume": identity, "status": "already_exists"},
            )

        await self._store.put(identity, info)

    async def delete(self, identity: str) -> bool:
        """Delete the PVC. Returns False if it did not exist."""
        deleted = await self._api.delete(identity)
        if deleted:
            logger.info(
                "Volume deleted",
                extra={"event": LogEvent.VOLUME_REMOVED, "volume": identity},
            )
        return deleted
