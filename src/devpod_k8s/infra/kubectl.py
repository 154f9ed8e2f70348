"""kubectl client for the driver.

Runs kubectl as an asyncio subprocess and exposes the handful of
resource operations the driver needs (namespaces, PVCs, service
accounts, pods). Cancelling the awaiting task kills the subprocess.
"""

import asyncio
import json
import logging
import shlex

from pydantic import BaseModel

from devpod_k8s.config import KubernetesConfig, get_driver_config

logger = logging.getLogger(__name__)


class KubectlError(Exception):
    """Raised when kubectl exits with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, output: str) -> None:
        self.args_list = args
        self.returncode = returncode
        self.output = output.strip()
        super().__init__(
            f"kubectl {shlex.join(args)} exited with code {returncode}: {self.output}"
        )

    @property
    def already_exists(self) -> bool:
        return "AlreadyExists" in self.output or "already exists" in self.output


# =============================================================================
# Pydantic Models
# =============================================================================


class VolumeMountSpec(BaseModel):
    """Container volume mount."""

    name: str
    mount_path: str
    sub_path: str = ""

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        result = {"name": self.name, "mountPath": self.mount_path}
        if self.sub_path:
            result["subPath"] = self.sub_path
        return result


class SecurityContext(BaseModel):
    """Container security context."""

    run_as_user: int = 0
    run_as_group: int = 0
    run_as_non_root: bool = False
    privileged: bool | None = None
    capabilities_add: list[str] = []

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        result: dict = {
            "runAsUser": self.run_as_user,
            "runAsGroup": self.run_as_group,
            "runAsNonRoot": self.run_as_non_root,
        }
        if self.privileged is not None:
            result["privileged"] = self.privileged
        if self.capabilities_add:
            result["capabilities"] = {"add": list(self.capabilities_add)}
        return result


class ContainerSpec(BaseModel):
    """Pod container."""

    name: str
    image: str
    command: list[str] = []
    args: list[str] = []
    env: dict[str, str] = {}
    volume_mounts: list[VolumeMountSpec] = []
    resources: dict[str, dict[str, str]] = {}
    security_context: SecurityContext = SecurityContext()

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        result: dict = {
            "name": self.name,
            "image": self.image,
            "env": [{"name": k, "value": v} for k, v in self.env.items()],
            "volumeMounts": [m.to_api() for m in self.volume_mounts],
            "securityContext": self.security_context.to_api(),
        }
        if self.command:
            result["command"] = self.command
        if self.args:
            result["args"] = self.args
        if self.resources:
            result["resources"] = self.resources
        return result


class PodConfig(BaseModel):
    """Pod manifest backed by a single persistent volume claim."""

    name: str
    labels: dict[str, str] = {}
    service_account: str = ""
    containers: list[ContainerSpec]
    volume_name: str
    claim_name: str
    node_selector: dict[str, str] = {}
    restart_policy: str = "Never"

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        spec: dict = {
            "containers": [c.to_api() for c in self.containers],
            "restartPolicy": self.restart_policy,
            "volumes": [
                {
                    "name": self.volume_name,
                    "persistentVolumeClaim": {"claimName": self.claim_name},
                }
            ],
        }
        if self.service_account:
            spec["serviceAccountName"] = self.service_account
        if self.node_selector:
            spec["nodeSelector"] = self.node_selector
        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {"name": self.name, "labels": self.labels},
            "spec": spec,
        }


class PvcConfig(BaseModel):
    """PersistentVolumeClaim manifest."""

    name: str
    size: str
    labels: dict[str, str] = {}
    storage_class: str = ""
    access_modes: list[str] = ["ReadWriteOnce"]

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        metadata = {"name": self.name, "labels": self.labels}
        spec: dict = {
            "accessModes": self.access_modes,
            "resources": {"requests": {"storage": self.size}},
        }
        if self.storage_class:
            spec["storageClassName"] = self.storage_class
        return {
            "apiVersion": "v1",
            "kind": "PersistentVolumeClaim",
            "metadata": metadata,
            "spec": spec,
        }


class ServiceAccountConfig(BaseModel):
    """ServiceAccount manifest."""

    name: str
    labels: dict[str, str] = {}

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        return {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": {"name": self.name, "labels": self.labels},
        }


# =============================================================================
# kubectl Client (Singleton)
# =============================================================================


class KubectlClient:
    """Async kubectl runner."""

    def __init__(self, config: KubernetesConfig | None = None) -> None:
        self._config = config or get_driver_config().kubernetes

    def base_args(self) -> list[str]:
        """Global flags prepended to every command."""
        args = [self._config.kubectl_path]
        if self._config.kubeconfig:
            args += ["--kubeconfig", self._config.kubeconfig]
        if self._config.context:
            args += ["--context", self._config.context]
        if self._config.namespace:
            args += ["--namespace", self._config.namespace]
        return args

    async def run(
        self,
        args: list[str],
        *,
        stdin: str | None = None,
        cwd: str | None = None,
        merge_stderr: bool = True,
    ) -> str:
        """Run kubectl and return its output.

        With merge_stderr the returned text is stdout and stderr interleaved,
        which is what callers want for diagnostics. Commands whose stdout is
        parsed (``-o json``) pass merge_stderr=False so warnings do not
        corrupt it.

        Raises:
            KubectlError: kubectl is missing or exited non-zero.
        """
        cmd = [*self.base_args(), *args]
        logger.debug("Running %s", shlex.join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT if merge_stderr else asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as e:
            raise KubectlError(args, 127, str(e)) from e

        try:
            stdout, stderr = await proc.communicate(
                stdin.encode("utf-8") if stdin is not None else None
            )
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            raise

        output = stdout.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            if stderr:
                output += stderr.decode("utf-8", errors="replace")
            raise KubectlError(args, proc.returncode or 1, output)
        return output

    async def create(self, manifest: dict) -> str:
        """Submit a manifest with ``kubectl create -f -``."""
        return await self.run(["create", "-f", "-"], stdin=json.dumps(manifest))

    async def get_json(self, kind: str, name: str) -> dict | None:
        """Get a resource as JSON, or None if it does not exist."""
        output = await self.run(
            ["get", kind, name, "--ignore-not-found", "-o", "json"],
            merge_stderr=False,
        )
        if not output.strip():
            return None
        return json.loads(output)

    async def delete(self, kind: str, name: str, wait: bool = True) -> bool:
        """Delete a resource. Returns False if it did not exist."""
        args = ["delete", kind, name, "--ignore-not-found"]
        if not wait:
            args.append("--wait=false")
        output = await self.run(args)
        return bool(output.strip())


_kubectl_client: KubectlClient | None = None


def get_kubectl_client() -> KubectlClient:
    """Get the global kubectl client singleton."""
    global _kubectl_client
    if _kubectl_client is None:
        _kubectl_client = KubectlClient()
    return _kubectl_client


# =============================================================================
# Namespace API
# =============================================================================


class NamespaceAPI:
    """Namespace operations."""

    def __init__(self, client: KubectlClient | None = None) -> None:
        self._kubectl = client or get_kubectl_client()

    async def create(self, name: str) -> None:
        await self._kubectl.run(["create", "namespace", name])
        logger.info("Created namespace: %s", name)


# =============================================================================
# PersistentVolumeClaim API
# =============================================================================


class PvcAPI:
    """PersistentVolumeClaim operations."""

    def __init__(self, client: KubectlClient | None = None) -> None:
        self._kubectl = client or get_kubectl_client()

    async def get(self, name: str) -> dict | None:
        return await self._kubectl.get_json("pvc", name)

    async def create(self, config: PvcConfig) -> str:
        """Create a PVC. Fails if one with the same name exists."""
        output = await self._kubectl.create(config.to_api())
        logger.info("Created PVC: %s", config.name)
        return output

    async def annotate(self, name: str, key: str, value: str) -> None:
        """Set an annotation that must not already be present."""
        await self._kubectl.run(["annotate", "pvc", name, f"{key}={value}"])

    async def delete(self, name: str) -> bool:
        deleted = await self._kubectl.delete("pvc", name, wait=False)
        if deleted:
            logger.info("Removed PVC: %s", name)
        return deleted


# =============================================================================
# ServiceAccount API
# =============================================================================


class ServiceAccountAPI:
    """ServiceAccount operations."""

    def __init__(self, client: KubectlClient | None = None) -> None:
        self._kubectl = client or get_kubectl_client()

    async def create(self, config: ServiceAccountConfig) -> None:
        """Create a service account (idempotent)."""
        try:
            await self._kubectl.create(config.to_api())
        except KubectlError as e:
            if e.already_exists:
                logger.debug("Service account already exists: %s", config.name)
                return
            raise
        logger.info("Created service account: %s", config.name)


# =============================================================================
# Pod API
# =============================================================================


class PodAPI:
    """Pod operations."""

    def __init__(self, client: KubectlClient | None = None) -> None:
        self._kubectl = client or get_kubectl_client()

    async def create(self, config: PodConfig) -> str:
        """Create a pod and return kubectl's output."""
        return await self._kubectl.create(config.to_api())

    async def get(self, name: str) -> dict | None:
        return await self._kubectl.get_json("pod", name)

    async def delete(self, name: str) -> bool:
        deleted = await self._kubectl.delete("pod", name)
        if deleted:
            logger.info("Removed pod: %s", name)
        return deleted

    async def copy_to(
        self,
        name: str,
        container: str,
        local_path: str,
        remote_path: str,
        cwd: str | None = None,
    ) -> str:
        """Copy a local path into a pod container with ``kubectl cp``."""
        return await self._kubectl.run(
            ["cp", "-c", container, local_path, f"{name}:{remote_path}"],
            cwd=cwd,
        )
