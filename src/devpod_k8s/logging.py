"""Logging configuration for the devpod Kubernetes driver.

Supports two formats:
- text: Human-readable, with resource context appended
- json: One object per line for log aggregation

Logs go to stderr; stdout carries command output only.
"""

import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import json as jsonlogger

from devpod_k8s.config import LoggingConfig

# Extra fields identifying the resource a record is about
CONTEXT_FIELDS = ("pod", "volume", "namespace", "service_account")


class RateLimitFilter(logging.Filter):
    """Drops repeats of the same record within a time window.

    Readiness polling logs the pod phase on every poll, so a pod that
    stays Pending would otherwise repeat one line per interval. Records
    are keyed by logger, event, resource and rendered message.
    WARNING and above are never dropped.
    """

    def __init__(
        self,
        rate_limit_seconds: float = 5.0,
        max_cache_size: int = 1000,
        name: str = "",
    ) -> None:
        super().__init__(name)
        self._window = rate_limit_seconds
        self._limit = max_cache_size
        self._seen: dict[tuple[str, ...], float] = {}

    def _key(self, record: logging.LogRecord) -> tuple[str, ...]:
        context = tuple(str(getattr(record, field, "")) for field in CONTEXT_FIELDS)
        return (record.name, str(getattr(record, "event", "")), *context, record.getMessage())

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.WARNING:
            return True

        key = self._key(record)
        now = time.monotonic()
        seen_at = self._seen.pop(key, None)
        if seen_at is not None and now - seen_at < self._window:
            self._seen[key] = seen_at
            return False

        # Insertion order doubles as age order
        self._seen[key] = now
        while len(self._seen) > self._limit:
            del self._seen[next(iter(self._seen))]
        return True


class ContextFormatter(logging.Formatter):
    """Text formatter that appends resource context, e.g. ``[pod=devpod-1a2b]``."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{field}={getattr(record, field)}"
            for field in CONTEXT_FIELDS
            if getattr(record, field, None)
        )
        return f"{line} [{context}]" if context else line


class DriverJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level, logger, service and pid."""

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            service=self._service,
            pid=record.process,
        )
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging(config: LoggingConfig) -> None:
    """Install a single stderr handler on the root logger."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    if config.format == "json":
        formatter: logging.Formatter = DriverJsonFormatter(config)
    else:
        formatter = ContextFormatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.addFilter(RateLimitFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Subprocess transport debug output
    logging.getLogger("asyncio").setLevel(logging.WARNING)
