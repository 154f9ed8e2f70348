"""Fixtures for driver unit tests."""

from unittest.mock import AsyncMock

import pytest

from devpod_k8s.config import KubernetesConfig, RuntimeConfig
from devpod_k8s.infra import NamespaceAPI, PodAPI, PvcAPI, ServiceAccountAPI
from devpod_k8s.models import (
    ContainerInfo,
    DevContainerConfig,
    ImageConfig,
    ImageDetails,
    MergedDevContainerConfig,
    Mount,
)
from devpod_k8s.runtimes.kubernetes.naming import ResourceNaming


@pytest.fixture
def kube_config() -> KubernetesConfig:
    """KubernetesConfig with fast polling and no optional features."""
    return KubernetesConfig(
        namespace="",
        create_namespace=False,
        service_account="",
        node_selector="",
        resources="",
        disk_size="10Gi",
        storage_class="",
        pod_timeout=5.0,
        poll_interval=0.0,
    )


@pytest.fixture
def naming() -> ResourceNaming:
    return ResourceNaming(RuntimeConfig())


@pytest.fixture
def mock_pod_api() -> AsyncMock:
    """Mock PodAPI for testing."""
    api = AsyncMock(spec=PodAPI)
    api.create = AsyncMock(return_value="pod/devpod-x created")
    api.get = AsyncMock(return_value={"status": {"phase": "Running"}})
    api.delete = AsyncMock(return_value=True)
    api.copy_to = AsyncMock(return_value="")
    return api


@pytest.fixture
def mock_pvc_api() -> AsyncMock:
    """Mock PvcAPI for testing."""
    api = AsyncMock(spec=PvcAPI)
    api.get = AsyncMock(return_value=None)
    api.create = AsyncMock(return_value="")
    api.annotate = AsyncMock()
    api.delete = AsyncMock(return_value=True)
    return api


@pytest.fixture
def mock_service_account_api() -> AsyncMock:
    """Mock ServiceAccountAPI for testing."""
    api = AsyncMock(spec=ServiceAccountAPI)
    api.create = AsyncMock()
    return api


@pytest.fixture
def mock_namespace_api() -> AsyncMock:
    """Mock NamespaceAPI for testing."""
    api = AsyncMock(spec=NamespaceAPI)
    api.create = AsyncMock()
    return api


@pytest.fixture
def parsed_config() -> DevContainerConfig:
    return DevContainerConfig(
        origin="/home/dev/project/.devcontainer/devcontainer.json",
        name="project",
        image="mcr.microsoft.com/devcontainers/base:ubuntu",
    )


@pytest.fixture
def merged_config() -> MergedDevContainerConfig:
    return MergedDevContainerConfig(
        mounts=[Mount(type="bind", source="/data", target="/mnt/data")],
        container_env={"FOO": "bar", "LANG": "C.UTF-8"},
        cap_add=["SYS_PTRACE"],
        privileged=None,
    )


@pytest.fixture
def image_details() -> ImageDetails:
    return ImageDetails(
        id="sha256:abc",
        config=ImageConfig(entrypoint=["/docker-entrypoint.sh"], cmd=["bash"], user="root"),
    )


@pytest.fixture
def container_info(
    parsed_config: DevContainerConfig,
    merged_config: MergedDevContainerConfig,
    image_details: ImageDetails,
) -> ContainerInfo:
    return ContainerInfo(
        parsed_config=parsed_config,
        merged_config=merged_config,
        image_details=image_details,
        image_name="mcr.microsoft.com/devcontainers/base:ubuntu",
        workspace_mount="type=bind,source=/home/dev/project,target=/workspaces/project",
        labels=["dev.containers.id=project", "devpod.sh/workspace=project"],
    )
