"""Shape of the classification JSON returned by the LLM.

Hunks are referenced by parser ID only; file, line and diff text are filled
back in from the parsed diff when the review is assembled. Sections may be
given flat or grouped under chapters.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LLMHunkRef(_ResponseModel):
    """One classified hunk reference."""

    id: str = ""
    importance: str = ""
    is_test: bool | None = Field(default=None, alias="isTest")

    @field_validator("importance", mode="before")
    @classmethod
    def _null_importance(cls, v: Any) -> Any:
        return "" if v is None else v


class LLMSection(_ResponseModel):
    id: str = ""
    title: str | None = None
    chapter_id: str | None = Field(default=None, alias="chapterId")
    narrative: str = ""
    hunks: list[LLMHunkRef] = Field(default_factory=list)

    @field_validator("id", "narrative", mode="before")
    @classmethod
    def _null_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("hunks", mode="before")
    @classmethod
    def _null_hunks(cls, v: Any) -> Any:
        return [] if v is None else v


class LLMChapter(_ResponseModel):
    id: str = ""
    title: str | None = None
    sections: list[LLMSection] = Field(default_factory=list)

    @field_validator("sections", mode="before")
    @classmethod
    def _null_sections(cls, v: Any) -> Any:
        return [] if v is None else v


class LLMResponse(_ResponseModel):
    """Top-level classification response."""

    title: str = ""
    sections: list[LLMSection] = Field(default_factory=list)
    chapters: list[LLMChapter] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _null_title(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("sections", "chapters", mode="before")
    @classmethod
    def _null_lists(cls, v: Any) -> Any:
        return [] if v is None else v

    def all_sections(self) -> list[LLMSection]:
        """Flat sections first, then chaptered ones tagged with their chapter ID."""
        flat = list(self.sections)
        for chapter in self.chapters:
            for section in chapter.sections:
                if section.chapter_id is None and chapter.id:
                    section = section.model_copy(update={"chapter_id": chapter.id})
                flat.append(section)
        return flat
