"""Operation result types for the Kubernetes runtime."""

from enum import Enum

from pydantic import BaseModel


class OperationStatus(str, Enum):
    """Operation status values."""

    COMPLETED = "completed"

    # Pod-specific
    ALREADY_STOPPED = "already_stopped"

    # Delete-specific
    ALREADY_DELETED = "already_deleted"


class OperationResult(BaseModel):
    """Result of an idempotent stop/delete operation."""

    status: OperationStatus
    message: str = ""

    @property
    def is_success(self) -> bool:
        """Check if operation completed or was already in desired state."""
        return self.status in (
            OperationStatus.COMPLETED,
            OperationStatus.ALREADY_STOPPED,
            OperationStatus.ALREADY_DELETED,
        )


class DevContainerStatus(BaseModel):
    """Observed state of a dev container."""

    id: str
    phase: str
    volume_exists: bool
    initialized: bool

    @property
    def running(self) -> bool:
        return self.phase == "Running"
