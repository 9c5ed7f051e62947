"""Tests for cli/generate.py module."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from diffstory.cli.generate import (
    PARTIAL,
    describe_validation,
    pick_source,
    report_outcome,
)
from diffstory.cli.main import cli
from diffstory.core.errors import GenerationError
from diffstory.generate.pipeline import (
    GenerationCancelled,
    GenerationFailed,
    GenerationSucceeded,
    Generator,
)
from diffstory.generate.sources import PRESETS
from diffstory.generate.validation import ValidationResult
from diffstory.model.review import Review
from diffstory.review.service import ReviewService
from diffstory.storage.store import ReviewStore

DIFF = "diff --git a/app.py b/app.py\n@@ -1 +1,2 @@\n x\n+y\n@@ -9 +10,2 @@\n z\n+w\n"


class TestPickSource:
    """Tests for pick_source function."""

    def test_defaults_to_configured(self) -> None:
        source = pick_source(None, None, None, ["git", "diff"])
        assert source.name == "configured"
        assert source.command == ("git", "diff")

    def test_preset(self) -> None:
        assert pick_source("staged", None, None, []) is PRESETS["staged"]

    def test_commit(self) -> None:
        assert pick_source(None, "abc", None, []).command[:3] == ("git", "show", "abc")

    def test_range(self) -> None:
        assert pick_source(None, None, "v1..v2", []).command[2] == "v1..v2"

    @pytest.mark.parametrize("bad", ["v1", "v1..", "..v2", "v1...v2"])
    def test_bad_range(self, bad: str) -> None:
        with pytest.raises(click.BadParameter):
            pick_source(None, None, bad, [])

    def test_more_than_one(self) -> None:
        with pytest.raises(click.UsageError):
            pick_source("staged", "abc", None, [])


class TestDescribeValidation:
    """Tests for describe_validation function."""

    def test_one_line_per_problem(self) -> None:
        validation = ValidationResult(missing_ids=["a::1", "b::2"], duplicate_ids=["c::3"])

        lines = describe_validation(validation)

        assert lines == [
            "2 hunks not classified: a::1, b::2",
            "1 hunk classified more than once: c::3",
        ]

    def test_long_lists_truncated(self) -> None:
        validation = ValidationResult(missing_ids=[f"f::{i}" for i in range(13)])

        (line,) = describe_validation(validation)

        assert line.startswith("13 hunks not classified: f::0, f::1")
        assert "f::9" in line
        assert "f::10" not in line
        assert line.endswith("... (+3)")

    def test_valid_has_no_lines(self) -> None:
        assert describe_validation(ValidationResult()) == []


class TestReportOutcome:
    """Tests for report_outcome function."""

    def test_success(self, make_review: Any, tmp_path: Path) -> None:
        outcome = GenerationSucceeded(review=make_review("/w"), file_path=tmp_path / "r.json")
        assert report_outcome(outcome) == 0

    def test_failed(self) -> None:
        assert report_outcome(GenerationFailed(error=GenerationError.no_changes())) == 1

    def test_cancelled(self) -> None:
        assert report_outcome(GenerationCancelled()) == 130


def _llm_json(ids: Sequence[str]) -> str:
    return json.dumps(
        {
            "title": "App tweaks",
            "sections": [
                {
                    "id": "s1",
                    "narrative": "Two small edits.",
                    "hunks": [{"id": i, "importance": "medium"} for i in ids],
                }
            ],
        }
    )


class TestGenerateCommand:
    """End-to-end runs of `diffstory generate` with scripted subprocesses."""

    @pytest.fixture
    def cli_store(self, tmp_path: Path) -> ReviewStore:
        return ReviewStore(tmp_path / "xdg-cache" / "diffstory")

    def _invoke(
        self,
        args: list[str],
        llm_output: str,
        workdir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> tuple[Any, list[list[str]]]:
        monkeypatch.chdir(workdir)
        calls: list[list[str]] = []

        async def scripted(argv: Sequence[str], cwd: Path | str | None = None) -> str:
            _ = cwd
            calls.append(list(argv))
            return DIFF if argv[0] == "git" else llm_output

        def make_generator(service: ReviewService, working_directory: Path) -> Generator:
            return Generator(service, working_directory, runner=scripted)

        with (
            patch("diffstory.generate.llm.resolve_llm_command", return_value=["fake-llm"]),
            patch("diffstory.cli.generate.Generator", make_generator),
        ):
            result = CliRunner().invoke(cli, ["generate", *args])
        return result, calls

    def test_success_writes_review(
        self, workdir: Path, cli_store: ReviewStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        result, calls = self._invoke(
            ["--source", "staged", "-m", "just tweaks"],
            _llm_json(["app.py::1", "app.py::10"]),
            workdir,
            monkeypatch,
        )

        assert result.exit_code == 0, result.output
        assert "Review written: 1 section, 2 hunks" in result.output
        assert calls[0] == list(PRESETS["staged"].command)
        assert calls[1][0] == "fake-llm"
        assert "just tweaks" in calls[1][-1]
        assert cli_store.read(workdir).title == "App tweaks"

    def test_incomplete_with_fail(
        self, workdir: Path, cli_store: ReviewStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        result, _ = self._invoke(
            ["--on-invalid", "fail"], _llm_json(["app.py::1"]), workdir, monkeypatch
        )

        assert result.exit_code == 1
        assert "1 hunk not classified: app.py::10" in result.output
        assert not cli_store.path_for_directory(workdir).exists()

    def test_incomplete_with_partial(
        self, workdir: Path, cli_store: ReviewStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        result, _ = self._invoke(
            ["--on-invalid", PARTIAL], _llm_json(["app.py::1"]), workdir, monkeypatch
        )

        assert result.exit_code == 0, result.output
        review: Review = cli_store.read(workdir)
        assert review.sections[-1].id == "unclassified"

    def test_incomplete_with_retry_exhausted(
        self, workdir: Path, cli_store: ReviewStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        result, calls = self._invoke(
            ["--on-invalid", "retry", "--max-retries", "1"],
            _llm_json(["app.py::1"]),
            workdir,
            monkeypatch,
        )

        assert result.exit_code == 1
        assert "No retries left" in result.output
        assert [c[0] for c in calls] == ["git", "fake-llm", "fake-llm"]

    def test_ask_without_tty_gives_up(
        self, workdir: Path, cli_store: ReviewStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        result, _ = self._invoke([], _llm_json(["app.py::1"]), workdir, monkeypatch)

        assert result.exit_code == 1
        assert not cli_store.path_for_directory(workdir).exists()

    def test_source_options_conflict(
        self, workdir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        result, calls = self._invoke(["-s", "staged", "-c", "abc"], "", workdir, monkeypatch)

        assert result.exit_code == 2
        assert calls == []

    def test_missing_llm_command(self, workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(workdir)
        error = GenerationError.llm_command_not_found("nope", "Install it.")

        with patch("diffstory.generate.llm.resolve_llm_command", side_effect=error):
            result = CliRunner().invoke(cli, ["generate"])

        assert result.exit_code == 1
