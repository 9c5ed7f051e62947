"""HTTP routes for the review ingest server.

``POST /review`` accepts a review JSON body and hands it to the ingest
service in lenient mode (importance is stored as-is). Responses are plain
text; success is an empty 200.
"""

from __future__ import annotations

import asyncio
import importlib.metadata
import time

import structlog
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect, Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from diffstory.core.errors import DiffstoryError, ErrorCode
from diffstory.model.review import Review
from diffstory.review.service import ReviewService

logger = structlog.get_logger()

MAX_BODY_BYTES = 10 * 1024 * 1024
DEFAULT_READ_TIMEOUT_SEC = 5.0


def _get_version() -> str:
    """Get package version from installed metadata."""
    try:
        return importlib.metadata.version("diffstory")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


async def _read_capped_body(request: Request, limit: int) -> bytes | None:
    """Read the request body, returning None once it exceeds ``limit`` bytes."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        return None

    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) > limit:
            return None
    return bytes(body)


def _text(message: str, status_code: int) -> PlainTextResponse:
    return PlainTextResponse(message + "\n", status_code=status_code)


def create_routes(
    service: ReviewService,
    *,
    max_body_bytes: int = MAX_BODY_BYTES,
    read_timeout_sec: float = DEFAULT_READ_TIMEOUT_SEC,
) -> list[Route]:
    """Create HTTP routes bound to the ingest service."""
    start_time = time.time()
    version = _get_version()
    limit_mb = max_body_bytes // (1024 * 1024)

    async def health(request: Request) -> JSONResponse:
        """Liveness probe."""
        _ = request  # unused
        return JSONResponse(
            {
                "status": "healthy",
                "version": version,
                "store": str(service.store.base_dir),
                "uptime_seconds": round(time.time() - start_time, 1),
            }
        )

    async def submit_review(request: Request) -> Response:
        try:
            async with asyncio.timeout(read_timeout_sec):
                body = await _read_capped_body(request, max_body_bytes)
        except TimeoutError:
            return _text("Request body read timed out", 408)
        except ClientDisconnect:
            logger.debug("client_disconnected")
            return _text("Client disconnected", 400)

        if body is None:
            logger.warning("request_body_too_large", limit=max_body_bytes)
            return _text(f"Request body too large (max {limit_mb}MB)", 413)

        try:
            review = Review.model_validate_json(body)
        except ValidationError as e:
            return _text(f"Invalid JSON: {e}", 400)

        try:
            await run_in_threadpool(service.submit, review, strict=False)
        except DiffstoryError as e:
            if e.code == ErrorCode.MISSING_WORKING_DIRECTORY:
                return _text("Missing workingDirectory field", 400)
            if e.code == ErrorCode.INVALID_WORKING_DIRECTORY:
                return _text(f"Invalid workingDirectory: {e.message}", 400)
            logger.error("review_store_failed", error=e.error_name, message=e.message)
            return _text(f"Failed to store review: {e.message}", 500)

        logger.info(
            "review_received",
            working_directory=review.working_directory,
            title=review.title,
            sections=review.section_count(),
        )
        return Response(status_code=200)

    return [
        Route("/health", health, methods=["GET"]),
        Route("/review", submit_review, methods=["POST"]),
    ]
