"""Review data model."""

from diffstory.model.review import (
    Hunk,
    Importance,
    Review,
    Section,
    normalize_importance,
    valid_importance,
)

__all__ = [
    "Hunk",
    "Importance",
    "Review",
    "Section",
    "normalize_importance",
    "valid_importance",
]
