"""Loopback HTTP ingest server."""

from diffstory.server.app import create_app
from diffstory.server.lifecycle import ReviewServer, run_server
from diffstory.server.routes import MAX_BODY_BYTES

__all__ = ["MAX_BODY_BYTES", "ReviewServer", "create_app", "run_server"]
