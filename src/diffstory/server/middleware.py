"""HTTP middleware for request correlation and write timeouts."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from diffstory.core.logging import bind_request_id, unbind_request_id

REQUEST_ID_HEADER = "X-Request-Id"

# Type alias for the call_next function
CallNext = Callable[[Request], Awaitable[Response]]


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request ID to the logging context and echo it in the response."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response = await call_next(request)
        finally:
            unbind_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class WriteTimeoutMiddleware:
    """Bound every response write so a stalled client cannot pin a worker."""

    def __init__(self, app: ASGIApp, timeout_sec: float) -> None:
        self.app = app
        self.timeout_sec = timeout_sec

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def timed_send(message: Message) -> None:
            async with asyncio.timeout(self.timeout_sec):
                await send(message)

        await self.app(scope, receive, timed_send)
