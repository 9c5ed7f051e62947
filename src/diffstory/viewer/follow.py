"""Live terminal view driven by the review watcher."""

from __future__ import annotations

from rich.console import Console

from diffstory.core.progress import status
from diffstory.viewer.filter import FilterLevel
from diffstory.viewer.render import render_review, render_waiting
from diffstory.watcher.watcher import EventKind, ReviewWatcher


async def follow(
    watcher: ReviewWatcher,
    console: Console,
    filter_level: FilterLevel = FilterLevel.MEDIUM,
    *,
    max_events: int | None = None,
) -> int:
    """Re-render the review on every watcher event until the watcher closes.

    Returns the number of events handled. ``max_events`` stops early.
    """
    await watcher.start()
    console.print(render_waiting(watcher.working_directory))

    handled = 0
    async for event in watcher.events():
        handled += 1
        if event.kind in (EventKind.CREATED, EventKind.UPDATED) and event.review is not None:
            console.clear()
            console.print(render_review(event.review, filter_level))
        elif event.kind is EventKind.CLEARED:
            console.clear()
            console.print(render_waiting(watcher.working_directory))
        else:
            status(f"Failed to load review: {event.error}", style="error")

        if max_events is not None and handled >= max_events:
            break
    return handled
