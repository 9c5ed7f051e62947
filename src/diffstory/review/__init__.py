"""Review ingest."""

from diffstory.review.service import ReviewService, SubmitResult, utc_now

__all__ = ["ReviewService", "SubmitResult", "utc_now"]
