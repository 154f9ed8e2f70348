"""First-run data seeding into the dev container."""

from __future__ import annotations

import logging
import os

from devpod_k8s.errors import CopyError
from devpod_k8s.infra import KubectlError, PodAPI
from devpod_k8s.logging_schema import LogEvent
from devpod_k8s.models import Mount

logger = logging.getLogger(__name__)


class DataSeeder:
    """Copies local mount sources into a running pod."""

    def __init__(self, container_name: str, pods: PodAPI | None = None) -> None:
        self._container = container_name
        self._pods = pods or PodAPI()

    async def seed(self, name: str, origin: str, mounts: list[Mount]) -> None:
        """Copy each mount's source directory contents to its target.

        Relative sources resolve against the directory of the
        devcontainer.json (origin). Stops at the first failure; mounts
        already copied stay copied.

        Raises:
            CopyError: A copy failed.
        """
        cwd = os.path.dirname(origin) or None
        for mount in mounts:
            source = mount.source.rstrip("/") + "/."
            target = mount.target.rstrip("/") or "/"
            logger.info(
                "Copy %s into DevContainer %s",
                mount.source,
                mount.target,
                extra={"event": LogEvent.COPY_STARTED, "pod": name},
            )
            try:
                await self._pods.copy_to(name, self._container, source, target, cwd=cwd)
            except KubectlError as e:
                logger.error(
                    "Copy failed",
                    extra={"event": LogEvent.COPY_FAILED, "pod": name, "source": mount.source},
                )
                raise CopyError("copy to devcontainer", detail=e.output) from e
