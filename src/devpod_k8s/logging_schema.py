"""Log event types for structured logging."""

from enum import StrEnum


class LogEvent(StrEnum):
    """Log event types for the driver.

    Used with logger.info/warning/error extra dict:
        logger.info("message", extra={"event": LogEvent.POD_CREATED, ...})
    """

    # Namespace events
    NAMESPACE_CREATED = "namespace_created"
    NAMESPACE_FAILED = "namespace_failed"

    # Volume events
    VOLUME_FOUND = "volume_found"
    VOLUME_CREATED = "volume_created"
    VOLUME_REMOVED = "volume_removed"
    SNAPSHOT_WRITTEN = "snapshot_written"
    SNAPSHOT_INVALID = "snapshot_invalid"

    # Pod events
    SERVICE_ACCOUNT_CREATED = "service_account_created"
    MOUNT_SKIPPED = "mount_skipped"
    POD_CREATED = "pod_created"
    POD_WAITING = "pod_waiting"
    POD_RUNNING = "pod_running"
    POD_FAILED = "pod_failed"
    POD_REMOVED = "pod_removed"

    # Seeding events
    COPY_STARTED = "copy_started"
    COPY_FAILED = "copy_failed"

    # Config events
    RESOURCE_INVALID = "resource_invalid"

    # Error events
    DRIVER_ERROR = "driver_error"
