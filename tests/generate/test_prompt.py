"""Tests for generate/prompt.py module."""

from __future__ import annotations

import json

from diffstory.diff.parser import ParsedHunk
from diffstory.generate.prompt import CLASSIFICATION_TEMPLATE, build_hunk_listing, build_prompt

HUNKS = [
    ParsedHunk(id="a.py::1", file="a.py", start_line=1, diff='@@ -1 +1 @@\n-x = "{"\n+x = "}"'),
    ParsedHunk(id="b.py::9", file="b.py", start_line=9, diff="@@ -9 +9 @@\n+ü"),
]


class TestBuildHunkListing:
    """Tests for build_hunk_listing function."""

    def test_is_json_array_of_hunks(self) -> None:
        listing = json.loads(build_hunk_listing(HUNKS))

        assert listing == [
            {"id": "a.py::1", "file": "a.py", "startLine": 1, "diff": HUNKS[0].diff},
            {"id": "b.py::9", "file": "b.py", "startLine": 9, "diff": HUNKS[1].diff},
        ]

    def test_one_hunk_per_line(self) -> None:
        lines = build_hunk_listing(HUNKS).splitlines()
        assert len(lines) == 4
        assert "ü" in lines[2]

    def test_empty(self) -> None:
        assert json.loads(build_hunk_listing([])) == []


class TestBuildPrompt:
    """Tests for build_prompt function."""

    def test_contains_template_and_every_id(self) -> None:
        prompt = build_prompt(HUNKS)

        assert prompt.startswith(CLASSIFICATION_TEMPLATE)
        assert '"a.py::1"' in prompt
        assert '"b.py::9"' in prompt
        assert "User context" not in prompt
        assert "CRITICAL" not in prompt

    def test_context_appended(self) -> None:
        prompt = build_prompt(HUNKS, context="  Focus on the parser.  ")
        assert "User context: Focus on the parser.\n" in prompt

    def test_blank_context_ignored(self) -> None:
        assert "User context" not in build_prompt(HUNKS, context="   ")

    def test_retry_lists_missing_ids(self) -> None:
        prompt = build_prompt(HUNKS, missing_ids=["a.py::1", "b.py::9"])

        assert "CRITICAL" in prompt
        assert "a.py::1, b.py::9" in prompt
        assert prompt.index("CRITICAL") > prompt.index('"b.py::9"')
