"""Importance filter for the viewer."""

from __future__ import annotations

from enum import StrEnum

from diffstory.model.review import Importance


class FilterLevel(StrEnum):
    """Minimum importance a hunk needs to be shown."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return _LABELS[self]

    def next(self) -> FilterLevel:
        """Cycle low -> medium -> high -> low."""
        order = list(FilterLevel)
        return order[(order.index(self) + 1) % len(order)]

    def passes(self, importance: str) -> bool:
        """Whether a hunk with this importance is shown. Empty always passes."""
        if not importance:
            return True
        if self is FilterLevel.HIGH:
            return importance == Importance.HIGH
        if self is FilterLevel.MEDIUM:
            return importance in (Importance.HIGH, Importance.MEDIUM)
        return True


_LABELS = {
    FilterLevel.LOW: "Low (all)",
    FilterLevel.MEDIUM: "Medium",
    FilterLevel.HIGH: "High only",
}
