"""Container info snapshot storage.

The snapshot is a write-once key-value record keyed by identity. The
lifecycle code only talks to SnapshotStore, so the storage medium can be
swapped without touching it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import ValidationError

from devpod_k8s.errors import CreateError, VolumeLookupError
from devpod_k8s.infra import KubectlError, PvcAPI
from devpod_k8s.logging_schema import LogEvent
from devpod_k8s.models import ContainerInfo

if TYPE_CHECKING:
    from devpod_k8s.runtimes.kubernetes.naming import ResourceNaming

logger = logging.getLogger(__name__)


class SnapshotStore(ABC):
    """Interface for container info persistence.

    Implementations:
    - AnnotationSnapshotStore: annotation on the workspace PVC
    """

    @abstractmethod
    async def get(self, identity: str) -> ContainerInfo | None:
        """Read the snapshot for an identity.

        Returns:
            The snapshot, or None if it is missing or cannot be parsed.

        Raises:
            VolumeLookupError: The backing store could not be queried.
        """
        ...

    @abstractmethod
    async def put(self, identity: str, info: ContainerInfo) -> None:
        """Write the snapshot for an identity.

        Write-once: fails if a snapshot already exists.

        Raises:
            CreateError: The write was rejected.
        """
        ...


class AnnotationSnapshotStore(SnapshotStore):
    """Stores the snapshot as a JSON annotation on the PVC named identity."""

    def __init__(self, naming: ResourceNaming, pvcs: PvcAPI | None = None) -> None:
        self._naming = naming
        self._pvcs = pvcs or PvcAPI()

    async def get(self, identity: str) -> ContainerInfo | None:
        try:
            pvc = await self._pvcs.get(identity)
        except (KubectlError, ValueError) as e:
            raise VolumeLookupError(f"get persistent volume claim '{identity}'", detail=str(e)) from e
        if pvc is None:
            return None

        annotations = pvc.get("metadata", {}).get("annotations") or {}
        raw = annotations.get(self._naming.info_annotation)
        if not raw:
            logger.warning(
                "PVC has no container info",
                extra={"event": LogEvent.SNAPSHOT_INVALID, "volume": identity},
            )
            return None

        try:
            return ContainerInfo.from_json(raw)
        except ValidationError as e:
            logger.warning(
                "PVC container info cannot be parsed",
                extra={"event": LogEvent.SNAPSHOT_INVALID, "volume": identity, "error": str(e)},
            )
            return None

    async def put(self, identity: str, info: ContainerInfo) -> None:
        try:
            await self._pvcs.annotate(identity, self._naming.info_annotation, info.to_json())
        except KubectlError as e:
            raise CreateError("store container info", detail=e.output) from e
        logger.info(
            "Stored container info",
            extra={"event": LogEvent.SNAPSHOT_WRITTEN, "volume": identity},
        )
