"""Diff producers a generation can be run against."""

from __future__ import annotations

from dataclasses import dataclass

_DIFF_FLAGS = ("--no-color", "--no-ext-diff")


@dataclass(frozen=True, slots=True)
class DiffSource:
    """A labelled diff command."""

    name: str
    label: str
    command: tuple[str, ...]

    @property
    def hint(self) -> str:
        """The git command without the output-shaping flags."""
        return " ".join(arg for arg in self.command if arg not in _DIFF_FLAGS)


UNCOMMITTED = DiffSource(
    "uncommitted", "Uncommitted changes", ("git", "diff", "HEAD", *_DIFF_FLAGS)
)
STAGED = DiffSource("staged", "Staged changes", ("git", "diff", "--cached", *_DIFF_FLAGS))
SINCE_MAIN = DiffSource("main", "Changes since main", ("git", "diff", "main...HEAD", *_DIFF_FLAGS))

PRESETS: dict[str, DiffSource] = {s.name: s for s in (UNCOMMITTED, STAGED, SINCE_MAIN)}


def commit_source(ref: str) -> DiffSource:
    """Changes introduced by a single commit."""
    return DiffSource(
        "commit", f"Commit: {ref}", ("git", "show", ref, *_DIFF_FLAGS, "--format=")
    )


def range_source(start: str, end: str) -> DiffSource:
    """Changes between two commits (``start..end``)."""
    return DiffSource(
        "range", f"Range: {start}..{end}", ("git", "diff", f"{start}..{end}", *_DIFF_FLAGS)
    )
