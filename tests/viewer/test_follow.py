"""Tests for viewer/follow.py module."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence
from io import StringIO
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from rich.console import Console

from diffstory.model.review import Review
from diffstory.storage.store import ReviewStore
from diffstory.viewer.filter import FilterLevel
from diffstory.viewer.follow import follow
from diffstory.watcher import EventKind, ReviewEvent, ReviewWatcher


class ScriptedWatcher:
    """Stands in for ReviewWatcher with a fixed event sequence."""

    def __init__(self, events: Sequence[ReviewEvent]) -> None:
        self.working_directory = "/tmp/proj"
        self.started = False
        self._events = list(events)

    async def start(self) -> None:
        self.started = True

    async def events(self) -> AsyncIterator[ReviewEvent]:
        for event in self._events:
            yield event


def _console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, force_terminal=False, width=120), buffer


class TestFollow:
    """Tests for follow function."""

    @pytest.mark.asyncio
    async def test_renders_each_event(self, make_review: Callable[..., Review]) -> None:
        watcher = ScriptedWatcher(
            [
                ReviewEvent(kind=EventKind.CREATED, review=make_review("/tmp/proj", title="One")),
                ReviewEvent(kind=EventKind.CLEARED),
                ReviewEvent(kind=EventKind.UPDATED, review=make_review("/tmp/proj", title="Two")),
            ]
        )
        console, buffer = _console()

        handled = await follow(watcher, console)  # type: ignore[arg-type]

        out = buffer.getvalue()
        assert watcher.started
        assert handled == 3
        assert out.count("Waiting for a review of /tmp/proj") == 2
        assert out.index("One") < out.index("Two")

    @pytest.mark.asyncio
    async def test_filter_applied(self, make_review: Callable[..., Review]) -> None:
        review = make_review("/tmp/proj")
        review.sections[0].hunks[0].importance = "low"
        watcher = ScriptedWatcher([ReviewEvent(kind=EventKind.CREATED, review=review)])
        console, buffer = _console()

        await follow(watcher, console, FilterLevel.HIGH)  # type: ignore[arg-type]

        assert "1 hunk hidden by filter" in buffer.getvalue()

    @pytest.mark.asyncio
    async def test_error_reported_on_status_console(self) -> None:
        watcher = ScriptedWatcher(
            [ReviewEvent(kind=EventKind.ERROR, error=RuntimeError("bad bytes"))]
        )
        console, _ = _console()
        status_console, status_buffer = _console()

        with patch("diffstory.core.progress._console", status_console):
            handled = await follow(watcher, console)  # type: ignore[arg-type]

        assert handled == 1
        assert "Failed to load review: bad bytes" in status_buffer.getvalue()

    @pytest.mark.asyncio
    async def test_max_events_stops_early(self, make_review: Callable[..., Review]) -> None:
        events: list[Any] = [
            ReviewEvent(kind=EventKind.CREATED, review=make_review("/tmp/proj"))
        ] * 5
        console, _ = _console()
        watcher = ScriptedWatcher(events)

        handled = await follow(watcher, console, max_events=2)  # type: ignore[arg-type]

        assert handled == 2

    @pytest.mark.asyncio
    async def test_with_real_watcher(
        self, store: ReviewStore, workdir: Path, make_review: Callable[..., Review]
    ) -> None:
        store.write(make_review(workdir, title="Stored already"))
        console, buffer = _console()

        async with asyncio.timeout(5), ReviewWatcher(str(workdir), store) as watcher:
            handled = await follow(watcher, console, FilterLevel.LOW, max_events=1)

        assert handled == 1
        assert "Stored already" in buffer.getvalue()
