"""Review data model shared by every producer and the store.

The wire format (HTTP body, MCP tool input, on-disk file) uses camelCase keys;
Python code uses snake_case attributes. Missing keys decode to empty values so
that lenient producers and legacy files load without errors.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Importance(StrEnum):
    """Canonical hunk importance levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_IMPORTANCE_ALIASES: dict[str, Importance] = {
    "high": Importance.HIGH,
    "critical": Importance.HIGH,
    "important": Importance.HIGH,
    "medium": Importance.MEDIUM,
    "moderate": Importance.MEDIUM,
    "normal": Importance.MEDIUM,
    "low": Importance.LOW,
    "minor": Importance.LOW,
    "trivial": Importance.LOW,
}


def normalize_importance(value: str | None) -> str:
    """Map an importance label (or a known alias) to its canonical value.

    Case-insensitive. Unknown values map to "" which strict validators reject.
    """
    if not value:
        return ""
    canonical = _IMPORTANCE_ALIASES.get(value.strip().lower())
    return canonical.value if canonical else ""


def valid_importance(value: str | None) -> bool:
    """True only for the canonical lowercase values."""
    return value in (Importance.HIGH, Importance.MEDIUM, Importance.LOW)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Dump using wire keys, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Hunk(_WireModel):
    """One contiguous diff region attached to a section."""

    file: str = ""
    start_line: int = Field(default=0, alias="startLine")
    diff: str = ""
    importance: str = ""
    is_test: bool | None = Field(default=None, alias="isTest")


class Section(_WireModel):
    """A narrative paragraph plus the hunks it explains."""

    id: str = ""
    title: str | None = None
    chapter_id: str | None = Field(default=None, alias="chapterId")
    narrative: str = ""
    hunks: list[Hunk] = Field(default_factory=list)

    @field_validator("hunks", mode="before")
    @classmethod
    def _null_hunks(cls, v: Any) -> Any:
        return [] if v is None else v


class Review(_WireModel):
    """One narrated, importance-tagged diff summary for a working directory."""

    working_directory: str = Field(default="", alias="workingDirectory")
    title: str = ""
    created_at: datetime | None = Field(default=None, alias="createdAt")
    sections: list[Section] = Field(default_factory=list)

    @field_validator("sections", mode="before")
    @classmethod
    def _null_sections(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("created_at", mode="before")
    @classmethod
    def _empty_created_at(cls, v: Any) -> Any:
        return None if v == "" else v

    def section_count(self) -> int:
        return len(self.sections)

    def hunk_count(self) -> int:
        return sum(len(s.hunks) for s in self.sections)

    def all_hunks(self) -> list[Hunk]:
        return [h for s in self.sections for h in s.hunks]

    def to_json(self) -> str:
        """Render the on-disk form: two-space indented JSON with wire keys."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @classmethod
    def from_json(cls, data: str | bytes) -> Review:
        return cls.model_validate_json(data)
