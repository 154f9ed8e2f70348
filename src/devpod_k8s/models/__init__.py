"""Devcontainer data models."""

from devpod_k8s.models.devcontainer import (
    ContainerInfo,
    DevContainerConfig,
    ImageConfig,
    ImageDetails,
    MergedDevContainerConfig,
    Mount,
    MountType,
)

__all__ = [
    "ContainerInfo",
    "DevContainerConfig",
    "ImageConfig",
    "ImageDetails",
    "MergedDevContainerConfig",
    "Mount",
    "MountType",
]
