"""Unit tests for VolumeManager and AnnotationSnapshotStore."""

import json
from unittest.mock import AsyncMock

import pytest

from devpod_k8s.config import KubernetesConfig
from devpod_k8s.errors import CreateError, VolumeLookupError
from devpod_k8s.infra import KubectlError
from devpod_k8s.models import ContainerInfo
from devpod_k8s.runtimes.kubernetes.naming import ResourceNaming
from devpod_k8s.runtimes.kubernetes.snapshot import AnnotationSnapshotStore
from devpod_k8s.runtimes.kubernetes.volume import VolumeManager


def _pvc(annotations: dict | None = None) -> dict:
    metadata: dict = {"name": "devpod-abc", "labels": {"devpod.sh/created": "true"}}
    if annotations is not None:
        metadata["annotations"] = annotations
    return {"metadata": metadata, "spec": {}}


class TestAnnotationSnapshotStore:
    """Tests for AnnotationSnapshotStore."""

    @pytest.fixture
    def store(self, naming: ResourceNaming, mock_pvc_api: AsyncMock) -> AnnotationSnapshotStore:
        return AnnotationSnapshotStore(naming, mock_pvc_api)

    async def test_get_missing_pvc(self, store: AnnotationSnapshotStore, mock_pvc_api: AsyncMock) -> None:
        mock_pvc_api.get.return_value = None

        assert await store.get("devpod-abc") is None
        mock_pvc_api.get.assert_called_once_with("devpod-abc")

    async def test_get_parses_annotation(
        self,
        store: AnnotationSnapshotStore,
        mock_pvc_api: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        mock_pvc_api.get.return_value = _pvc({"devpod.sh/info": container_info.to_json()})

        assert await store.get("devpod-abc") == container_info

    async def test_get_missing_annotation_is_not_found(
        self, store: AnnotationSnapshotStore, mock_pvc_api: AsyncMock
    ) -> None:
        mock_pvc_api.get.return_value = _pvc()

        assert await store.get("devpod-abc") is None

    async def test_get_unparseable_annotation_is_not_found(
        self, store: AnnotationSnapshotStore, mock_pvc_api: AsyncMock
    ) -> None:
        mock_pvc_api.get.return_value = _pvc({"devpod.sh/info": "{broken"})

        assert await store.get("devpod-abc") is None

    async def test_get_tolerates_unknown_fields(
        self, store: AnnotationSnapshotStore, mock_pvc_api: AsyncMock
    ) -> None:
        raw = json.dumps({"imageName": "ubuntu", "addedLater": [1, 2]})
        mock_pvc_api.get.return_value = _pvc({"devpod.sh/info": raw})

        info = await store.get("devpod-abc")

        assert info is not None
        assert info.image_name == "ubuntu"

    async def test_get_query_failure(self, store: AnnotationSnapshotStore, mock_pvc_api: AsyncMock) -> None:
        mock_pvc_api.get.side_effect = KubectlError(["get"], 1, "connection refused")

        with pytest.raises(VolumeLookupError):
            await store.get("devpod-abc")

    async def test_put_annotates(
        self,
        store: AnnotationSnapshotStore,
        mock_pvc_api: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        await store.put("devpod-abc", container_info)

        name, key, value = mock_pvc_api.annotate.call_args[0]
        assert (name, key) == ("devpod-abc", "devpod.sh/info")
        assert ContainerInfo.from_json(value) == container_info

    async def test_put_rejected(
        self,
        store: AnnotationSnapshotStore,
        mock_pvc_api: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        mock_pvc_api.annotate.side_effect = KubectlError(
            ["annotate"], 1, "error: --overwrite is false but found the following declared annotation(s)"
        )

        with pytest.raises(CreateError) as exc_info:
            await store.put("devpod-abc", container_info)

        assert "--overwrite is false" in exc_info.value.detail


class TestVolumeManager:
    """Tests for VolumeManager."""

    @pytest.fixture
    def mock_store(self) -> AsyncMock:
        store = AsyncMock(spec=AnnotationSnapshotStore)
        store.get = AsyncMock(return_value=None)
        store.put = AsyncMock()
        return store

    @pytest.fixture
    def manager(
        self,
        kube_config: KubernetesConfig,
        naming: ResourceNaming,
        mock_pvc_api: AsyncMock,
        mock_store: AsyncMock,
    ) -> VolumeManager:
        return VolumeManager(kube_config, naming, api=mock_pvc_api, store=mock_store)

    async def test_lookup_not_found(self, manager: VolumeManager, mock_store: AsyncMock) -> None:
        result = await manager.lookup("devpod-abc")

        assert result.found is False
        assert result.info is None

    async def test_lookup_found(
        self,
        manager: VolumeManager,
        mock_store: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        mock_store.get.return_value = container_info

        result = await manager.lookup("devpod-abc")

        assert result.found is True
        assert result.info == container_info

    async def test_create(
        self,
        manager: VolumeManager,
        mock_pvc_api: AsyncMock,
        mock_store: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        await manager.create("devpod-abc", container_info)

        config = mock_pvc_api.create.call_args[0][0]
        assert config.name == "devpod-abc"
        assert config.size == "10Gi"
        assert config.labels == {"devpod.sh/created": "true"}
        mock_store.put.assert_called_once_with("devpod-abc", container_info)

    async def test_create_uses_storage_class(
        self,
        naming: ResourceNaming,
        mock_pvc_api: AsyncMock,
        mock_store: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        config = KubernetesConfig(disk_size="50Gi", storage_class="ssd")
        manager = VolumeManager(config, naming, api=mock_pvc_api, store=mock_store)

        await manager.create("devpod-abc", container_info)

        pvc = mock_pvc_api.create.call_args[0][0]
        assert pvc.size == "50Gi"
        assert pvc.storage_class == "ssd"

    async def test_create_resumes_existing_pvc(
        self,
        manager: VolumeManager,
        mock_pvc_api: AsyncMock,
        mock_store: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        mock_pvc_api.create.side_effect = KubectlError(
            ["create"], 1, 'persistentvolumeclaims "devpod-abc" already exists'
        )

        await manager.create("devpod-abc", container_info)

        mock_store.put.assert_called_once_with("devpod-abc", container_info)

    async def test_create_rejected(
        self,
        manager: VolumeManager,
        mock_pvc_api: AsyncMock,
        mock_store: AsyncMock,
        container_info: ContainerInfo,
    ) -> None:
        mock_pvc_api.create.side_effect = KubectlError(["create"], 1, "exceeded quota")

        with pytest.raises(CreateError) as exc_info:
            await manager.create("devpod-abc", container_info)

        assert exc_info.value.detail == "exceeded quota"
        mock_store.put.assert_not_called()

    async def test_exists(self, manager: VolumeManager, mock_pvc_api: AsyncMock) -> None:
        assert await manager.exists("devpod-abc") is False

        mock_pvc_api.get.return_value = _pvc()
        assert await manager.exists("devpod-abc") is True

    async def test_delete(self, manager: VolumeManager, mock_pvc_api: AsyncMock) -> None:
        assert await manager.delete("devpod-abc") is True
        mock_pvc_api.delete.assert_called_once_with("devpod-abc")
