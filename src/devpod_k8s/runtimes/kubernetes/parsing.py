"""Parsers for driver option strings."""

import logging
import re

from devpod_k8s.logging_schema import LogEvent

logger = logging.getLogger(__name__)

# Kubernetes resource.Quantity, e.g. 500m, 1.5, 2Gi, 1e3
_QUANTITY = re.compile(r"^[+]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+|[KMGTPE]i|[mkMGTPE])?$")

_RESOURCE_SCOPES = ("requests", "limits")


def parse_labels(value: str) -> dict[str, str]:
    """Parse ``key=value[,key=value...]`` into a dict.

    Raises:
        ValueError: An entry has no ``=`` or an empty key.
    """
    result: dict[str, str] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, val = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"invalid label '{item}', expected key=value")
        result[key] = val.strip()
    return result


def parse_resources(value: str) -> dict[str, dict[str, str]]:
    """Parse ``requests.cpu=500m,limits.memory=1Gi`` into a resources block.

    Invalid entries are logged and skipped; a bad resource string never
    blocks a pod from being created.
    """
    resources: dict[str, dict[str, str]] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, quantity = item.partition("=")
        scope, dot, name = key.strip().partition(".")
        quantity = quantity.strip()
        if not sep or not dot or not name or scope not in _RESOURCE_SCOPES:
            logger.warning(
                "Skipping invalid resource '%s', expected requests.<name>=<qty> or limits.<name>=<qty>",
                item,
                extra={"event": LogEvent.RESOURCE_INVALID, "resource": item},
            )
            continue
        if not _QUANTITY.match(quantity):
            logger.warning(
                "Skipping resource '%s': invalid quantity '%s'",
                key,
                quantity,
                extra={"event": LogEvent.RESOURCE_INVALID, "resource": item},
            )
            continue
        resources.setdefault(scope, {})[name] = quantity
    return resources
