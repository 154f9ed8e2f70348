"""Resource naming utilities for the Kubernetes runtime."""

import hashlib

from devpod_k8s.config import RuntimeConfig


class ResourceNaming:
    """Centralized naming conventions for Kubernetes resources."""

    def __init__(self, config: RuntimeConfig) -> None:
        self._prefix = config.resource_prefix
        self._container = config.container_name
        self._annotation = config.info_annotation
        self._owner_labels = dict(config.owner_labels)

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def container_name(self) -> str:
        return self._container

    @property
    def volume_name(self) -> str:
        """Name of the pod-level volume referencing the PVC."""
        return self._container

    @property
    def info_annotation(self) -> str:
        return self._annotation

    @property
    def owner_labels(self) -> dict[str, str]:
        """Ownership labels for a new resource (a fresh copy each call)."""
        return dict(self._owner_labels)

    def identity(self, labels: list[str]) -> str:
        """Derive the pod/PVC name from the workspace labels.

        Order and duplicates do not matter. The result is a valid
        DNS-1123 name as long as the prefix is.
        """
        digest = hashlib.sha256("\n".join(sorted(set(labels))).encode("utf-8"))
        return f"{self._prefix}{digest.hexdigest()[:16]}"

    def sub_path(self, slot: int, source: str = "") -> str:
        """Location of a mount inside the shared volume."""
        return f"{self._container}/{source or slot}"
