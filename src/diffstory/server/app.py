"""Starlette application factory."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.routing import BaseRoute

from diffstory.review.service import ReviewService
from diffstory.server.middleware import RequestIdMiddleware, WriteTimeoutMiddleware
from diffstory.server.routes import DEFAULT_READ_TIMEOUT_SEC, MAX_BODY_BYTES, create_routes

DEFAULT_WRITE_TIMEOUT_SEC = 5.0


def create_app(
    service: ReviewService,
    *,
    max_body_bytes: int = MAX_BODY_BYTES,
    read_timeout_sec: float = DEFAULT_READ_TIMEOUT_SEC,
    write_timeout_sec: float = DEFAULT_WRITE_TIMEOUT_SEC,
) -> Starlette:
    """Create the ingest application (``POST /review``, ``GET /health``)."""
    routes: list[BaseRoute] = list(
        create_routes(
            service,
            max_body_bytes=max_body_bytes,
            read_timeout_sec=read_timeout_sec,
        )
    )
    app = Starlette(routes=routes)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(WriteTimeoutMiddleware, timeout_sec=write_timeout_sec)
    return app
