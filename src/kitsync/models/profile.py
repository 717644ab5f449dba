"""Models for profiles: named consumers with their own storage conventions."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntryTransform(BaseModel):
    """Declarative reshape applied to every configuration entry for a profile.

    Steps run in a fixed order: rename_values, join_fields, rename_fields,
    set_defaults. An empty transform is the identity.
    """

    model_config = ConfigDict(frozen=True)

    # field -> {old value -> new value}
    rename_values: dict[str, dict[str, str]] = Field(default_factory=dict)
    # [head, tail]: head (scalar or list) + tail (list) become one list under head
    join_fields: tuple[str, str] | None = None
    rename_fields: dict[str, str] = Field(default_factory=dict)
    set_defaults: dict[str, Any] = Field(default_factory=dict)

    def is_identity(self) -> bool:
        return (
            not self.rename_values
            and self.join_fields is None
            and not self.rename_fields
            and not self.set_defaults
        )


class Profile(BaseModel):
    """A registered (or synthesized) profile.

    All paths are relative to the project directory and use forward slashes.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    detection_marker: str = Field(..., min_length=1)
    content_root: str = Field(..., min_length=1)
    config_document: str = Field(..., min_length=1)
    config_root_key: str = Field(default="mcpServers", min_length=1)
    transform: EntryTransform = Field(default_factory=EntryTransform)

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        """Profile ids are case-insensitive; store them lower-cased."""
        normalized = v.strip().lower()
        if not normalized:
            raise ValueError("profile id must be a non-empty string")
        return normalized

    def marker_path(self, project_dir: Path) -> Path:
        return project_dir / self.detection_marker

    def content_root_path(self, project_dir: Path) -> Path:
        return project_dir / self.content_root

    def config_document_path(self, project_dir: Path) -> Path:
        return project_dir / self.config_document
