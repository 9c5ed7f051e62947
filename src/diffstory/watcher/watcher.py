"""Watches the review file for one working directory.

Design:
- The store's base directory is watched (not the file itself) so that the
  file appearing for the first time is observable
- Only changes to the target file pass the watch filter; the store's
  ``.tmp`` siblings never surface
- The atomic write shows up as a rename onto the target, which watchfiles
  reports as ``added``; it is treated as content arrival, never as removal
- Three capacity-one queues (reviews, cleared, errors) carry results; every
  send races against the shared done event so close() never blocks
- Items are tagged with a send sequence number; when several queues are
  ready at once, events() yields them in send order so a slow consumer
  always ends on the latest state
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog
from watchfiles import Change, awatch

from diffstory.core.errors import DiffstoryError, ErrorCode, StoreError
from diffstory.model.review import Review
from diffstory.storage.paths import canonicalize
from diffstory.storage.store import ReviewStore

logger = structlog.get_logger()

DEFAULT_DEBOUNCE_MS = 50
DEFAULT_STEP_MS = 50


class EventKind(StrEnum):
    """What happened to the watched review."""

    CREATED = "created"
    UPDATED = "updated"
    CLEARED = "cleared"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ReviewEvent:
    """One observation published by ReviewWatcher.events()."""

    kind: EventKind
    review: Review | None = None
    error: Exception | None = None


def _single_slot() -> asyncio.Queue[Any]:
    return asyncio.Queue(maxsize=1)


@dataclass
class ReviewWatcher:
    """Publishes review arrivals, removals and load errors for one directory."""

    working_directory: str
    store: ReviewStore
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    step_ms: int = DEFAULT_STEP_MS

    # Items are (sequence, payload) pairs
    reviews: asyncio.Queue[tuple[int, Review]] = field(default_factory=_single_slot, init=False)
    cleared: asyncio.Queue[tuple[int, None]] = field(default_factory=_single_slot, init=False)
    errors: asyncio.Queue[tuple[int, Exception]] = field(
        default_factory=_single_slot, init=False
    )

    review_path: Path = field(init=False)
    _done: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _sequence: itertools.count[int] = field(default_factory=itertools.count, init=False)
    _tasks: list[asyncio.Task[None]] = field(default_factory=list, init=False)
    _has_review: bool = field(default=False, init=False)
    _targets: frozenset[Path] = field(default=frozenset(), init=False)

    def __post_init__(self) -> None:
        self.working_directory = canonicalize(self.working_directory)
        self.review_path = self.store.path_for_directory(self.working_directory)
        # watchfiles reports resolved paths when the store dir sits behind a symlink
        self._targets = frozenset({self.review_path, self.review_path.resolve()})

    @property
    def closed(self) -> bool:
        return self._done.is_set()

    async def start(self) -> None:
        """Begin the initial load and the watch loop. Idempotent."""
        if self._tasks or self._done.is_set():
            return
        self._tasks = [
            asyncio.create_task(self._initial_load()),
            asyncio.create_task(self._watch_loop()),
        ]
        logger.info(
            "review_watcher_started",
            working_directory=self.working_directory,
            review_path=str(self.review_path),
        )

    async def close(self) -> None:
        """Stop watching. No events are delivered after this returns."""
        if self._done.is_set():
            return
        self._done.set()
        for task in self._tasks:
            if not task.done():
                task.cancel()
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
                await asyncio.wait_for(task, timeout=2.0)
        self._tasks = []
        logger.info("review_watcher_stopped", working_directory=self.working_directory)

    async def __aenter__(self) -> ReviewWatcher:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def events(self) -> AsyncIterator[ReviewEvent]:
        """Merge the three queues into a stream of ReviewEvents until close()."""
        channels: list[asyncio.Queue[Any]] = [self.reviews, self.cleared, self.errors]
        while not self._done.is_set():
            getters = {asyncio.create_task(q.get()): q for q in channels}
            stop = asyncio.create_task(self._done.wait())
            try:
                finished, _ = await asyncio.wait(
                    [*getters, stop], return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                for task in [*getters, stop]:
                    if not task.done():
                        task.cancel()

            if self._done.is_set():
                return
            ready = sorted(
                (
                    (task.result(), queue)
                    for task, queue in getters.items()
                    if task in finished and not task.cancelled()
                ),
                key=lambda pair: pair[0][0],
            )
            for (_, item), queue in ready:
                if self._done.is_set():
                    return
                yield self._to_event(queue, item)

    def _to_event(self, queue: asyncio.Queue[Any], item: Any) -> ReviewEvent:
        if queue is self.reviews:
            kind = EventKind.UPDATED if self._has_review else EventKind.CREATED
            self._has_review = True
            return ReviewEvent(kind=kind, review=item)
        if queue is self.cleared:
            self._has_review = False
            return ReviewEvent(kind=EventKind.CLEARED)
        return ReviewEvent(kind=EventKind.ERROR, error=item)

    async def _send(self, queue: asyncio.Queue[Any], item: Any) -> bool:
        """Deliver an item unless shutdown wins the race."""
        if self._done.is_set():
            return False
        put = asyncio.create_task(queue.put((next(self._sequence), item)))
        stop = asyncio.create_task(self._done.wait())
        try:
            finished, _ = await asyncio.wait({put, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (put, stop):
                if not task.done():
                    task.cancel()
        return put in finished

    async def _initial_load(self) -> None:
        try:
            review = self.store.load(self.review_path)
        except DiffstoryError:
            return
        await self._send(self.reviews, review)

    async def _reload(self) -> None:
        try:
            review = self.store.load(self.review_path)
        except StoreError as e:
            if e.code == ErrorCode.NOT_FOUND:
                await self._send(self.cleared, None)
                return
            logger.error("review_load_failed", path=str(self.review_path), error=str(e))
            await self._send(self.errors, e)
            return
        await self._send(self.reviews, review)

    def _is_target(self, change: Change, path: str) -> bool:
        return Path(path) in self._targets

    async def _handle_changes(self, changes: set[tuple[Change, str]]) -> None:
        kinds = {change for change, path in changes if Path(path) in self._targets}
        if not kinds:
            return
        logger.debug("review_file_changed", changes=sorted(k.name for k in kinds))
        if kinds == {Change.deleted}:
            await self._send(self.cleared, None)
        else:
            await self._reload()

    async def _watch_loop(self) -> None:
        try:
            async for changes in awatch(
                self.store.base_dir,
                watch_filter=self._is_target,
                debounce=self.debounce_ms,
                step=self.step_ms,
                recursive=False,
                stop_event=self._done,
                ignore_permission_denied=True,
            ):
                await self._handle_changes(changes)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            if self._done.is_set():
                return
            logger.error("review_watcher_error", error=str(e))
            await self._send(self.errors, e)
