"""Devcontainer configuration models.

The JSON form uses camelCase keys, matching devcontainer.json. Readers
ignore unknown keys and default missing ones, so snapshots written by an
older driver keep loading after fields are added here.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_WIRE = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class MountType(StrEnum):
    """Mount types the driver can place on the pod volume."""

    BIND = "bind"
    VOLUME = "volume"


class Mount(BaseModel):
    """A single devcontainer mount (``type=bind,source=/a,target=/b``)."""

    model_config = _WIRE

    source: str = ""
    target: str = ""
    type: str = ""
    other: list[str] = Field(default_factory=list)

    @classmethod
    def parse(cls, value: str) -> Mount:
        """Parse the devcontainer mount string format.

        Unknown ``key=value`` options and bare flags are kept in ``other``.
        """
        source = target = type_ = ""
        other: list[str] = []
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            key, sep, val = part.partition("=")
            key = key.strip().lower()
            if not sep:
                other.append(part)
            elif key in ("src", "source"):
                source = val
            elif key in ("dst", "destination", "target"):
                target = val
            elif key == "type":
                type_ = val
            else:
                other.append(part)
        return cls(source=source, target=target, type=type_, other=other)

    def __str__(self) -> str:
        parts = []
        if self.type:
            parts.append(f"type={self.type}")
        if self.source:
            parts.append(f"src={self.source}")
        if self.target:
            parts.append(f"dst={self.target}")
        parts.extend(self.other)
        return ",".join(parts)


class DevContainerConfig(BaseModel):
    """Parsed devcontainer.json.

    Keys the driver does not interpret are preserved so the snapshot
    carries the whole document.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    origin: str = ""
    name: str = ""
    image: str = ""


class MergedDevContainerConfig(BaseModel):
    """Devcontainer configuration after merging features and image metadata."""

    model_config = _WIRE

    mounts: list[Mount] = Field(default_factory=list)
    container_env: dict[str, str] = Field(default_factory=dict)
    cap_add: list[str] = Field(default_factory=list)
    privileged: bool | None = None
    entrypoints: list[str] = Field(default_factory=list)
    override_command: bool | None = None

    @field_validator("mounts", mode="before")
    @classmethod
    def parse_mount_strings(cls, value: object) -> object:
        """Accept mounts in the devcontainer string form as well as objects."""
        if isinstance(value, list):
            return [Mount.parse(item) if isinstance(item, str) else item for item in value]
        return value


class ImageConfig(BaseModel):
    model_config = _WIRE

    entrypoint: list[str] = Field(default_factory=list)
    cmd: list[str] = Field(default_factory=list)
    user: str = ""
    env: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)


class ImageDetails(BaseModel):
    """Image metadata used to resolve the container command."""

    model_config = _WIRE

    id: str = ""
    config: ImageConfig = Field(default_factory=ImageConfig)


class ContainerInfo(BaseModel):
    """Snapshot of everything needed to recreate the dev container.

    Written once when the volume is created and never rewritten, so a
    restart always uses the configuration of the first run.
    """

    model_config = _WIRE

    parsed_config: DevContainerConfig = Field(default_factory=DevContainerConfig)
    merged_config: MergedDevContainerConfig = Field(default_factory=MergedDevContainerConfig)
    image_details: ImageDetails = Field(default_factory=ImageDetails)
    image_name: str = ""
    workspace_mount: str = ""
    labels: list[str] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> ContainerInfo:
        """Parse a snapshot document.

        Raises:
            pydantic.ValidationError: If the document is not valid JSON or
                a known field has the wrong shape.
        """
        return cls.model_validate_json(raw)
