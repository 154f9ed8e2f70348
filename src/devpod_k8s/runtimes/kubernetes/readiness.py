"""Pod readiness polling."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from devpod_k8s.errors import StartupError
from devpod_k8s.infra import KubectlError, PodAPI
from devpod_k8s.logging_schema import LogEvent

if TYPE_CHECKING:
    from devpod_k8s.config import KubernetesConfig

logger = logging.getLogger(__name__)

# Waiting reasons that will not resolve without user intervention
FATAL_WAITING_REASONS = frozenset(
    {
        "ErrImagePull",
        "ImagePullBackOff",
        "CrashLoopBackOff",
        "CreateContainerConfigError",
        "CreateContainerError",
        "InvalidImageName",
    }
)


def _waiting_reason(pod: dict) -> tuple[str, str] | None:
    status = pod.get("status", {})
    statuses = status.get("initContainerStatuses", []) + status.get("containerStatuses", [])
    for container in statuses:
        waiting = (container.get("state") or {}).get("waiting") or {}
        reason = waiting.get("reason", "")
        if reason in FATAL_WAITING_REASONS:
            return reason, waiting.get("message", "")
    return None


class ReadinessWaiter:
    """Blocks until a pod reports the Running phase."""

    def __init__(self, config: KubernetesConfig, pods: PodAPI | None = None) -> None:
        self._config = config
        self._pods = pods or PodAPI()

    async def wait_running(self, name: str) -> dict:
        """Poll the pod until it runs.

        Nothing is cleaned up on failure; the pod stays for inspection.

        Returns:
            The pod document as reported once running.

        Raises:
            StartupError: The pod failed, cannot start, could not be
                queried, or did not run within pod_timeout.
        """
        logger.info(
            "Waiting for DevContainer Pod '%s' to come up...",
            name,
            extra={"event": LogEvent.POD_WAITING, "pod": name},
        )
        try:
            async with asyncio.timeout(self._config.pod_timeout):
                return await self._poll(name)
        except TimeoutError as e:
            logger.error(
                "Pod did not start in time",
                extra={"event": LogEvent.POD_FAILED, "pod": name, "timeout": self._config.pod_timeout},
            )
            raise StartupError(
                f"timed out after {self._config.pod_timeout:g}s waiting for pod '{name}'"
            ) from e

    async def _poll(self, name: str) -> dict:
        while True:
            try:
                pod = await self._pods.get(name)
            except (KubectlError, ValueError) as e:
                raise StartupError(f"get pod '{name}'", detail=str(e)) from e

            if pod is not None:
                phase = pod.get("status", {}).get("phase", "")
                if phase == "Running":
                    logger.info(
                        "Pod is running",
                        extra={"event": LogEvent.POD_RUNNING, "pod": name},
                    )
                    return pod
                if phase in ("Failed", "Succeeded"):
                    message = pod.get("status", {}).get("message", "")
                    raise StartupError(f"pod '{name}' terminated with phase {phase}", detail=message)

                fatal = _waiting_reason(pod)
                if fatal is not None:
                    reason, message = fatal
                    raise StartupError(f"pod '{name}' cannot start: {reason}", detail=message)

                logger.debug(
                    "Pod is %s",
                    phase or "pending",
                    extra={"event": LogEvent.POD_WAITING, "pod": name},
                )

            await asyncio.sleep(self._config.poll_interval)
