"""Ingest server lifecycle management."""

from __future__ import annotations

import socket
from dataclasses import dataclass, field

import structlog
import uvicorn

from diffstory.config.models import DiffstoryConfig, ServerConfig
from diffstory.review.service import ReviewService
from diffstory.server.app import create_app

logger = structlog.get_logger()

LOOPBACK_HOST = "127.0.0.1"


@dataclass
class ReviewServer:
    """
    Loopback HTTP server for review ingest.

    The listening socket is bound up front so that ``port`` reports the
    actual port (including an ephemeral one for port 0) before serving.
    """

    service: ReviewService
    config: ServerConfig = field(default_factory=ServerConfig)
    host: str = LOOPBACK_HOST

    _socket: socket.socket | None = field(default=None, init=False)
    _server: uvicorn.Server | None = field(default=None, init=False)

    def bind(self) -> int:
        """Bind the listening socket. Returns the bound port."""
        if self._socket is None:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind((self.host, self.config.port))
            except OSError:
                sock.close()
                raise
            self._socket = sock
            logger.debug("server_bound", host=self.host, port=self.port)
        return self.port

    @property
    def port(self) -> int:
        if self._socket is None:
            return 0
        return int(self._socket.getsockname()[1])

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def serve(self) -> None:
        """Serve until shutdown() is called or a signal is received."""
        self.bind()
        assert self._socket is not None

        app = create_app(
            self.service,
            max_body_bytes=self.config.max_body_bytes,
            read_timeout_sec=self.config.read_timeout_sec,
            write_timeout_sec=self.config.write_timeout_sec,
        )
        # uvicorn has no header-read deadline. timeout_keep_alive only runs
        # between requests, so a client trickling the headers of its first
        # request is not cut off. Body reads and writes are bounded in the app.
        uvicorn_config = uvicorn.Config(
            app,
            log_level="warning",  # Use structlog instead
            log_config=None,
            ws="none",
            lifespan="off",
            timeout_keep_alive=int(self.config.idle_timeout_sec),
            timeout_graceful_shutdown=int(self.config.shutdown_timeout_sec),
        )
        self._server = uvicorn.Server(uvicorn_config)

        logger.info("server_started", url=self.url)
        try:
            await self._server.serve(sockets=[self._socket])
        finally:
            self._socket.close()
            self._socket = None
            logger.info("server_stopped")

    def shutdown(self) -> None:
        """Request a graceful drain of in-flight requests."""
        if self._server is not None:
            self._server.should_exit = True

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started


async def run_server(service: ReviewService, config: DiffstoryConfig) -> None:
    """Run the ingest server until a shutdown signal arrives."""
    from diffstory.core.progress import get_console

    server = ReviewServer(service=service, config=config.server)
    server.bind()

    console = get_console()
    console.print(f"[bold]diffstory[/bold] listening on [cyan]{server.url}[/cyan]")
    console.print(f"  POST {server.url}/review", style="dim", highlight=False)
    console.print(f"  store: {service.store.base_dir}", style="dim", highlight=False)

    await server.serve()
