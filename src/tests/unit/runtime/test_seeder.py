"""Unit tests for DataSeeder."""

from unittest.mock import AsyncMock, call

import pytest

from devpod_k8s.errors import CopyError
from devpod_k8s.infra import KubectlError
from devpod_k8s.models import Mount
from devpod_k8s.runtimes.kubernetes.seeder import DataSeeder

ORIGIN = "/home/dev/project/.devcontainer/devcontainer.json"


class TestDataSeeder:
    """Tests for DataSeeder."""

    @pytest.fixture
    def seeder(self, mock_pod_api: AsyncMock) -> DataSeeder:
        return DataSeeder("devpod", pods=mock_pod_api)

    async def test_copies_in_order(self, seeder: DataSeeder, mock_pod_api: AsyncMock) -> None:
        mounts = [
            Mount(type="bind", source="/home/dev/project", target="/workspaces/project"),
            Mount(type="bind", source="/data", target="/mnt/data"),
        ]

        await seeder.seed("devpod-abc", ORIGIN, mounts)

        assert mock_pod_api.copy_to.call_args_list == [
            call(
                "devpod-abc", "devpod", "/home/dev/project/.", "/workspaces/project",
                cwd="/home/dev/project/.devcontainer",
            ),
            call("devpod-abc", "devpod", "/data/.", "/mnt/data", cwd="/home/dev/project/.devcontainer"),
        ]

    async def test_trailing_slashes_stripped(self, seeder: DataSeeder, mock_pod_api: AsyncMock) -> None:
        await seeder.seed("devpod-abc", ORIGIN, [Mount(type="bind", source="/data/", target="/mnt/data/")])

        _, _, source, target = mock_pod_api.copy_to.call_args[0]
        assert source == "/data/."
        assert target == "/mnt/data"

    async def test_relative_source_resolves_from_origin(
        self, seeder: DataSeeder, mock_pod_api: AsyncMock
    ) -> None:
        await seeder.seed("devpod-abc", ORIGIN, [Mount(type="bind", source="..", target="/ws")])

        args = mock_pod_api.copy_to.call_args
        assert args[0][2] == "../."
        assert args[1]["cwd"] == "/home/dev/project/.devcontainer"

    async def test_no_origin_uses_current_directory(
        self, seeder: DataSeeder, mock_pod_api: AsyncMock
    ) -> None:
        await seeder.seed("devpod-abc", "", [Mount(type="bind", source="src", target="/ws")])

        assert mock_pod_api.copy_to.call_args[1]["cwd"] is None

    async def test_nothing_to_copy(self, seeder: DataSeeder, mock_pod_api: AsyncMock) -> None:
        await seeder.seed("devpod-abc", ORIGIN, [])

        mock_pod_api.copy_to.assert_not_called()

    async def test_failure_stops_remaining_copies(
        self, seeder: DataSeeder, mock_pod_api: AsyncMock
    ) -> None:
        mock_pod_api.copy_to.side_effect = KubectlError(["cp"], 1, "tar: not found")
        mounts = [
            Mount(type="bind", source="/a", target="/a"),
            Mount(type="bind", source="/b", target="/b"),
        ]

        with pytest.raises(CopyError) as exc_info:
            await seeder.seed("devpod-abc", ORIGIN, mounts)

        assert exc_info.value.detail == "tar: not found"
        assert mock_pod_api.copy_to.call_count == 1
