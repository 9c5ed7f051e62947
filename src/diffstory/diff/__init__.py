"""Unified-diff parsing."""

from diffstory.diff.parser import ParsedHunk, parse_diff

__all__ = ["ParsedHunk", "parse_diff"]
