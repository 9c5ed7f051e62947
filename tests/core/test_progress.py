"""Tests for core/progress.py module.

Covers:
- status() function
- spinner() context manager
- pluralize() function
- suppress_console_logs() context manager
- ConsoleSuppressingFilter class
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from io import StringIO
from unittest.mock import patch

import pytest
from rich.console import Console

from diffstory.core.logging import ConsoleSuppressingFilter
from diffstory.core.progress import (
    is_console_suppressed,
    pluralize,
    spinner,
    status,
    suppress_console_logs,
)


@pytest.fixture
def captured_console() -> Iterator[StringIO]:
    """Swap the shared console for one writing to a buffer."""
    buffer = StringIO()
    console = Console(file=buffer, force_terminal=False, width=120)
    with patch("diffstory.core.progress._console", console):
        yield buffer


class TestPluralize:
    """Tests for pluralize function."""

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 hunks"), (1, "1 hunk"), (2, "2 hunks")],
    )
    def test_regular(self, count: int, expected: str) -> None:
        assert pluralize(count, "hunk") == expected

    def test_custom_plural(self) -> None:
        assert pluralize(3, "entry", "entries") == "3 entries"


class TestStatus:
    """Tests for status function."""

    def test_success_prefix(self, captured_console: StringIO) -> None:
        status("Review stored", style="success")
        assert "✓ Review stored" in captured_console.getvalue()

    def test_error_prefix(self, captured_console: StringIO) -> None:
        status("Failed", style="error")
        assert "✗ Failed" in captured_console.getvalue()

    def test_indent(self, captured_console: StringIO) -> None:
        status("nested", style="none", indent=4)
        assert captured_console.getvalue().startswith("    nested")


class TestSpinner:
    """Tests for spinner context manager."""

    def test_non_tty_prints_message(self, captured_console: StringIO) -> None:
        with patch("diffstory.core.progress._is_tty", return_value=False), spinner("Working"):
            pass
        assert "Working..." in captured_console.getvalue()

    def test_tty_suppresses_console_logs(self, captured_console: StringIO) -> None:
        seen: list[bool] = []
        with patch("diffstory.core.progress._is_tty", return_value=True), spinner("Working"):
            seen.append(is_console_suppressed())
        assert seen == [True]
        assert is_console_suppressed() is False


class TestSuppressConsoleLogs:
    """Tests for suppress_console_logs and the console filter."""

    def test_flag_toggles(self) -> None:
        assert is_console_suppressed() is False
        with suppress_console_logs():
            assert is_console_suppressed() is True
        assert is_console_suppressed() is False

    def test_nested_blocks_stay_suppressed_until_outermost_exits(self) -> None:
        with suppress_console_logs():
            with suppress_console_logs():
                pass
            assert is_console_suppressed() is True
        assert is_console_suppressed() is False

    def test_filter_drops_records_while_suppressed(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        log_filter = ConsoleSuppressingFilter()

        assert log_filter.filter(record) is True
        with suppress_console_logs():
            assert log_filter.filter(record) is False
