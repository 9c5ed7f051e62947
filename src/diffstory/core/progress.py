"""Terminal feedback for the diffstory CLI.

All output goes to stderr through one rich Console, keeping stdout free for
the MCP transport and for piping. While a spinner or the live viewer is
drawing, stderr log handlers are muted; file handlers keep writing.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

_console = Console(stderr=True)

_PREFIXES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

# Nesting depth of active live displays, per thread
_live = threading.local()


def get_console() -> Console:
    return _console


def is_console_suppressed() -> bool:
    return getattr(_live, "depth", 0) > 0


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Mute stderr log handlers for the duration of the block. Nests."""
    _live.depth = getattr(_live, "depth", 0) + 1
    try:
        yield
    finally:
        _live.depth -= 1


def _is_tty() -> bool:
    return sys.stderr.isatty()


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print one prefixed line, e.g. ``status("Review written", style="success")``."""
    _console.print(f"{' ' * indent}{_PREFIXES.get(style, '')}{message}", highlight=False)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """``pluralize(1, "hunk")`` is "1 hunk"; ``pluralize(3, "section")`` is "3 sections"."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


@contextmanager
def spinner(message: str) -> Iterator[None]:
    """Spin while the block runs; off a terminal, print ``message...`` once instead."""
    if not _is_tty():
        _console.print(f"{message}...", highlight=False)
        yield
        return
    with suppress_console_logs(), _console.status(f"[cyan]{message}[/cyan]", spinner="dots"):
        yield
