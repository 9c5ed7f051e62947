"""Shared validate-normalize-persist pipeline used by every producer."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import structlog

from diffstory.core.errors import IngestError, StoreError
from diffstory.model.review import Review, valid_importance
from diffstory.storage.paths import canonicalize
from diffstory.storage.store import ReviewStore

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class SubmitResult:
    """Where the submitted review was written."""

    file_path: Path


class ReviewService:
    """Accepts reviews from producers and writes them to the store.

    Strict submissions (MCP, generator) reject any hunk whose importance is
    not canonical, including empty. Lenient submissions (HTTP) store the
    payload as-is.
    """

    def __init__(self, store: ReviewStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utc_now

    @property
    def store(self) -> ReviewStore:
        return self._store

    def submit(self, review: Review, *, strict: bool = True) -> SubmitResult:
        """Validate, normalize and persist a review.

        The caller's object is left untouched; a normalized copy is written.

        Raises:
            IngestError: missing/invalid working directory or invalid importance.
            StoreError: the write failed.
        """
        if not review.working_directory:
            raise IngestError.missing_working_directory()

        try:
            normalized = canonicalize(review.working_directory)
        except StoreError as e:
            raise IngestError.invalid_working_directory(review.working_directory, e.message) from e

        if strict:
            for i, section in enumerate(review.sections):
                for j, hunk in enumerate(section.hunks):
                    if not valid_importance(hunk.importance):
                        raise IngestError.invalid_hunk_importance(i, j, hunk.importance)

        stored = review.model_copy(
            deep=True,
            update={
                "working_directory": normalized,
                "created_at": review.created_at or self._clock(),
            },
        )
        file_path = self._store.write(stored)

        logger.info(
            "review_stored",
            working_directory=normalized,
            title=stored.title,
            sections=stored.section_count(),
            hunks=stored.hunk_count(),
            path=str(file_path),
        )
        return SubmitResult(file_path=file_path)
