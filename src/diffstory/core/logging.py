"""structlog setup for diffstory.

Events are rendered by stdlib handlers through ``ProcessorFormatter`` so
file handles are owned by the logging module. An output goes either to
stderr (console renderer, muted while a live display is drawing) or to an
absolute file path (usually JSON). Nothing is ever logged to stdout: the
MCP stdio transport owns it.

Request correlation rides on structlog's context variables, so every event
logged while an HTTP request is in flight carries ``request_id``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from diffstory.config.models import LoggingConfig, LogOutputConfig

REQUEST_ID_KEY = "request_id"

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = (
    "mcp.server.lowlevel.server",
    "fastmcp.server.context.to_client",
    "uvicorn.access",
    "watchfiles.main",
)


def bind_request_id(request_id: str | None = None) -> str:
    """Bind a correlation ID to the logging context, generating one if needed."""
    rid = request_id or uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(**{REQUEST_ID_KEY: rid})
    return rid


def unbind_request_id() -> None:
    structlog.contextvars.unbind_contextvars(REQUEST_ID_KEY)


class ConsoleSuppressingFilter(logging.Filter):
    """Drop stderr records while a spinner or the live viewer owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        from diffstory.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _handler_for(output: LogOutputConfig, level: int) -> logging.Handler:
    handler: logging.Handler
    if output.destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
        handler.addFilter(ConsoleSuppressingFilter())
        colors = sys.stderr.isatty()
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        colors = False

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)

    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_shared_processors(),
        )
    )
    return handler


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]


def configure_logging(config: LoggingConfig) -> None:
    """Install one handler per configured output, replacing any previous setup.

    ``config.level`` gates what structlog emits at all; an output's own level
    (when set) filters further, so a DEBUG file can sit beside an INFO console.
    """
    root_level = logging.getLevelNamesMapping()[config.level]

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfigured per command, so loggers must not be cached
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.setLevel(root_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for output in config.outputs:
        level = logging.getLevelNamesMapping()[output.level or config.level]
        root.addHandler(_handler_for(output, level))
