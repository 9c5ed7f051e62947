"""Unified-diff hunk parser.

Splits ``git diff`` output into addressable hunks keyed ``<file>::<startLine>``
where ``startLine`` is the post-image start. Renames resolve to the new path.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

FILE_HEADER_PREFIX = "diff --git"
BINARY_MARKER = "Binary files "

_FILE_HEADER_RE = re.compile(r"^diff --git a/.+ b/(.+)$")
_HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")


@dataclass(frozen=True, slots=True)
class ParsedHunk:
    """One hunk as produced by the parser; lives for a single generation."""

    id: str
    file: str
    start_line: int
    diff: str


def _split_lines(text: str) -> list[str]:
    # Split on "\n" only so "\r" bytes survive inside hunk content.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _file_blocks(lines: list[str]) -> Iterator[list[str]]:
    block: list[str] = []
    for line in lines:
        if line.startswith(FILE_HEADER_PREFIX) and block:
            yield block
            block = []
        block.append(line)
    if block:
        yield block


def _block_path(block: list[str]) -> str:
    for line in block:
        if match := _FILE_HEADER_RE.match(line):
            return match.group(1)
    return ""


def _block_hunks(block: list[str]) -> Iterator[tuple[int, str]]:
    start_line = 0
    current: list[str] | None = None
    for line in block:
        if match := _HUNK_HEADER_RE.match(line):
            if current:
                yield start_line, "\n".join(current)
            start_line = int(match.group(1))
            current = []
        if current is not None:
            current.append(line)
    if current:
        yield start_line, "\n".join(current)


def parse_diff(text: str) -> list[ParsedHunk]:
    """Parse unified-diff text into hunks with unique IDs.

    Binary file blocks and blocks without a ``diff --git`` header are
    skipped. Colliding IDs get ``#2``, ``#3``... suffixes in input order.
    Input without any file header yields an empty list.
    """
    if not text:
        return []

    hunks: list[ParsedHunk] = []
    seen: dict[str, int] = {}
    for block in _file_blocks(_split_lines(text)):
        if any(line.startswith(BINARY_MARKER) for line in block):
            continue
        path = _block_path(block)
        if not path:
            continue

        for start_line, body in _block_hunks(block):
            base_id = f"{path}::{start_line}"
            count = seen.get(base_id, 0) + 1
            seen[base_id] = count
            hunk_id = base_id if count == 1 else f"{base_id}#{count}"
            hunks.append(ParsedHunk(id=hunk_id, file=path, start_line=start_line, diff=body))
    return hunks
