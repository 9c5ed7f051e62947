"""Rich rendering of a review."""

from __future__ import annotations

from datetime import datetime

from rich.console import Group, RenderableType
from rich.padding import Padding
from rich.rule import Rule
from rich.syntax import Syntax
from rich.text import Text

from diffstory.core.formatting import format_relative
from diffstory.core.progress import pluralize
from diffstory.model.review import Hunk, Review, Section
from diffstory.viewer.filter import FilterLevel

_IMPORTANCE_STYLES = {
    "high": "bold white on red",
    "medium": "black on yellow",
    "low": "white on blue",
}


def importance_badge(importance: str) -> Text:
    label = importance.upper() if importance else "UNSET"
    return Text(f" {label} ", style=_IMPORTANCE_STYLES.get(importance, "reverse"))


def _render_hunk(hunk: Hunk) -> RenderableType:
    header = Text.assemble(
        importance_badge(hunk.importance),
        " ",
        (f"{hunk.file}:{hunk.start_line}", "bold"),
    )
    if hunk.is_test:
        header.append("  test", style="dim italic")
    body = Syntax(hunk.diff, "diff", theme="ansi_dark", word_wrap=True)
    return Group(header, Padding(body, (0, 0, 1, 2)))


def _render_section(section: Section, filter_level: FilterLevel) -> RenderableType:
    visible = [h for h in section.hunks if filter_level.passes(h.importance)]
    hidden = len(section.hunks) - len(visible)

    heading = Text(section.title or section.id or "Untitled section", style="bold cyan")
    if section.chapter_id:
        heading.append(f"  [{section.chapter_id}]", style="dim")

    parts: list[RenderableType] = [Rule(heading, align="left")]
    if section.narrative:
        parts.append(Padding(Text(section.narrative), (0, 0, 1, 0)))
    parts.extend(_render_hunk(h) for h in visible)
    if hidden:
        parts.append(
            Text(f"{pluralize(hidden, 'hunk')} hidden by filter ({filter_level.label})", "dim")
        )
    return Group(*parts)


def render_review(
    review: Review,
    filter_level: FilterLevel = FilterLevel.LOW,
    now: datetime | None = None,
) -> RenderableType:
    """Title line, then every section with the hunks that pass ``filter_level``."""
    title = Text(review.title or "Untitled review", style="bold")
    meta = Text(
        f"{review.working_directory}  ·  {format_relative(review.created_at, now)}  ·  "
        f"{pluralize(review.section_count(), 'section')}, "
        f"{pluralize(review.hunk_count(), 'hunk')}  ·  filter: {filter_level.label}",
        style="dim",
    )
    return Group(
        title,
        meta,
        Text(""),
        *(_render_section(s, filter_level) for s in review.sections),
    )


def render_waiting(working_directory: str) -> RenderableType:
    return Text.assemble(
        ("Waiting for a review of ", "dim"),
        (working_directory, "bold"),
        ("...", "dim"),
    )
