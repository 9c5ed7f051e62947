"""Tests for review/service.py module.

Covers:
- Working directory validation and canonicalization
- Strict vs lenient importance handling
- created_at stamping
- Caller's review is not mutated
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from diffstory.core.errors import ErrorCode, IngestError
from diffstory.model.review import Hunk, Review, Section
from diffstory.review.service import ReviewService
from diffstory.storage.paths import canonicalize
from diffstory.storage.store import ReviewStore


def _with_importance(review: Review, importance: str) -> Review:
    review.sections[0].hunks[0].importance = importance
    return review


class TestSubmit:
    """Tests for ReviewService.submit."""

    def test_writes_canonical_directory(
        self, service: ReviewService, store: ReviewStore, workdir: Path, make_review
    ) -> None:
        result = service.submit(make_review(f"{workdir}/./"))

        stored = store.read(workdir)
        assert stored.working_directory == canonicalize(workdir)
        assert result.file_path == store.path_for_directory(workdir)

    def test_stamps_created_at_when_missing(
        self,
        service: ReviewService,
        store: ReviewStore,
        workdir: Path,
        make_review,
        fixed_now: datetime,
    ) -> None:
        service.submit(make_review(workdir))
        assert store.read(workdir).created_at == fixed_now

    def test_keeps_supplied_created_at(
        self, service: ReviewService, store: ReviewStore, workdir: Path, make_review
    ) -> None:
        when = datetime(2025, 1, 1, tzinfo=UTC)
        service.submit(make_review(workdir, created_at=when))
        assert store.read(workdir).created_at == when

    def test_caller_review_not_mutated(
        self, service: ReviewService, workdir: Path, make_review
    ) -> None:
        review = make_review(f"{workdir}/")
        service.submit(review)

        assert review.working_directory == f"{workdir}/"
        assert review.created_at is None

    def test_missing_working_directory(self, service: ReviewService, make_review) -> None:
        with pytest.raises(IngestError) as exc_info:
            service.submit(make_review(""))
        assert exc_info.value.code == ErrorCode.MISSING_WORKING_DIRECTORY

    def test_invalid_working_directory(self, service: ReviewService, make_review) -> None:
        with pytest.raises(IngestError) as exc_info:
            service.submit(make_review("/tmp/bad\x00dir"))
        assert exc_info.value.code == ErrorCode.INVALID_WORKING_DIRECTORY

    def test_nonexistent_directory_accepted(
        self, service: ReviewService, store: ReviewStore, tmp_path: Path, make_review
    ) -> None:
        target = tmp_path / "not-created-yet"
        service.submit(make_review(target))
        assert store.read(target).working_directory == str(target)

    def test_double_leading_slash_reaches_same_file(
        self, service: ReviewService, store: ReviewStore, tmp_path: Path, make_review
    ) -> None:
        target = tmp_path / "not-created-yet"

        result = service.submit(make_review(f"/{target}"))

        assert result.file_path == store.path_for_directory(target)
        assert store.read(target).working_directory == str(target)

    @pytest.mark.parametrize("importance", ["", "High", "urgent"])
    def test_strict_rejects_non_canonical_importance(
        self, service: ReviewService, store: ReviewStore, workdir: Path, make_review,
        importance: str,
    ) -> None:
        review = _with_importance(make_review(workdir), importance)

        with pytest.raises(IngestError) as exc_info:
            service.submit(review, strict=True)

        assert exc_info.value.code == ErrorCode.INVALID_HUNK_IMPORTANCE
        assert "sections[0].hunks[0]" in exc_info.value.message
        assert not store.path_for_directory(workdir).exists()

    def test_strict_reports_first_offender(
        self, service: ReviewService, workdir: Path
    ) -> None:
        review = Review(
            working_directory=str(workdir),
            sections=[
                Section(id="a", hunks=[Hunk(importance="low")]),
                Section(id="b", hunks=[Hunk(importance="high"), Hunk(importance="meh")]),
            ],
        )

        with pytest.raises(IngestError) as exc_info:
            service.submit(review)
        assert exc_info.value.details["section_index"] == 1
        assert exc_info.value.details["hunk_index"] == 1

    def test_lenient_stores_importance_as_is(
        self, service: ReviewService, store: ReviewStore, workdir: Path, make_review
    ) -> None:
        service.submit(_with_importance(make_review(workdir), "urgent"), strict=False)
        assert store.read(workdir).all_hunks()[0].importance == "urgent"

    def test_default_clock_is_utc(self, store: ReviewStore, workdir: Path, make_review) -> None:
        ReviewService(store).submit(make_review(workdir))
        created_at = store.read(workdir).created_at
        assert created_at is not None
        assert created_at.utcoffset() is not None


def test_store_property(store: ReviewStore) -> None:
    assert ReviewService(store).store is store

