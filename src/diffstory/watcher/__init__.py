"""Review file watcher."""

from diffstory.watcher.watcher import EventKind, ReviewEvent, ReviewWatcher

__all__ = ["EventKind", "ReviewEvent", "ReviewWatcher"]
