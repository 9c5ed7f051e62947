"""FastMCP server creation and wiring.

Stdout is the JSON-RPC transport, so logging goes to stderr and a file only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from diffstory.config.models import DiffstoryConfig
    from diffstory.review.service import ReviewService
    from diffstory.storage.store import ReviewStore

log = structlog.get_logger(__name__)

SERVER_NAME = "diffstory"
MCP_LOG_FILE = "mcp-server.log"


def create_mcp_server(service: ReviewService) -> FastMCP:
    """Create FastMCP server with the review tools wired to the ingest service.

    Args:
        service: ReviewService that accepted reviews are handed to

    Returns:
        Configured FastMCP server ready to run
    """
    from fastmcp import FastMCP

    from diffstory.mcp.tools import review

    mcp = FastMCP(
        SERVER_NAME,
        instructions="Submit narrated code reviews for display in the diffstory viewer.",
    )
    review.register_tools(mcp, service)

    log.info("mcp_server_created", store=str(service.store.base_dir))
    return mcp


def run_mcp_server(store: ReviewStore, config: DiffstoryConfig | None = None) -> None:
    """Create and run the MCP server on stdio."""
    from diffstory.config.models import LoggingConfig, LogOutputConfig
    from diffstory.core.logging import configure_logging
    from diffstory.review.service import ReviewService

    # Console: INFO on stderr. File: DEBUG with full tracebacks.
    log_file = store.base_dir / MCP_LOG_FILE
    console_level = config.logging.level if config is not None else "INFO"
    configure_logging(
        LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(destination="stderr", format="console", level=console_level),
                LogOutputConfig(destination=str(log_file), format="json", level="DEBUG"),
            ],
        )
    )

    log.info("mcp_server_starting", store=str(store.base_dir), log_file=str(log_file))

    mcp = create_mcp_server(ReviewService(store))

    log.info("mcp_server_running", transport="stdio")
    mcp.run()
