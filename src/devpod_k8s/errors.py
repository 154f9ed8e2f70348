"""Error handling module for devpod_k8s.

This module defines error codes, exception classes, and response models.

Error Response Format:
{
    "error": {
        "code": "VOLUME_NOT_FOUND",
        "message": "persistent volume 'devpod-abc' not found"
    }
}

Usage:
    from devpod_k8s.errors import CreateError, VolumeNotFoundError

    # Raise with default message
    raise VolumeNotFoundError()

    # Raise with context and raw kubectl output
    raise CreateError("create pod", detail=output) from e
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes."""

    CONFIG_ERROR = "CONFIG_ERROR"
    LOOKUP_ERROR = "LOOKUP_ERROR"
    CREATE_ERROR = "CREATE_ERROR"
    STARTUP_ERROR = "STARTUP_ERROR"
    COPY_ERROR = "COPY_ERROR"
    VOLUME_NOT_FOUND = "VOLUME_NOT_FOUND"


class ErrorDetail(BaseModel):
    """Error detail containing code and message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error response format."""

    error: ErrorDetail


class DriverError(Exception):
    """Base exception for devpod_k8s.

    All driver exceptions inherit from this class so callers can handle
    every lifecycle failure in one place.

    Attributes:
        code: The error code from ErrorCode enum
        message: Human-readable error message
        detail: Raw diagnostic output from the orchestrator, if any
    """

    def __init__(self, code: ErrorCode, message: str, detail: str = "") -> None:
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(f"{message}: {detail}" if detail else message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model."""
        return ErrorResponse(
            error=ErrorDetail(code=self.code.value, message=str(self))
        )


class ConfigError(DriverError):
    """Invalid driver or devcontainer configuration."""

    def __init__(self, message: str = "Invalid configuration", detail: str = "") -> None:
        super().__init__(ErrorCode.CONFIG_ERROR, message, detail)


class VolumeLookupError(DriverError):
    """Querying the persistent volume claim failed."""

    def __init__(self, message: str = "Volume lookup failed", detail: str = "") -> None:
        super().__init__(ErrorCode.LOOKUP_ERROR, message, detail)


class CreateError(DriverError):
    """The cluster rejected a volume, service account or pod."""

    def __init__(self, message: str = "Resource creation failed", detail: str = "") -> None:
        super().__init__(ErrorCode.CREATE_ERROR, message, detail)


class StartupError(DriverError):
    """The pod did not reach the running phase."""

    def __init__(self, message: str = "Pod failed to start", detail: str = "") -> None:
        super().__init__(ErrorCode.STARTUP_ERROR, message, detail)


class CopyError(DriverError):
    """Copying local data into the pod failed."""

    def __init__(self, message: str = "Copy to devcontainer failed", detail: str = "") -> None:
        super().__init__(ErrorCode.COPY_ERROR, message, detail)


class VolumeNotFoundError(DriverError):
    """The persistent volume for an identity does not exist."""

    def __init__(self, message: str = "Volume not found", detail: str = "") -> None:
        super().__init__(ErrorCode.VOLUME_NOT_FOUND, message, detail)
