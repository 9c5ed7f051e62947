"""Core module exports."""

from diffstory.core.errors import (
    ConfigError,
    DiffstoryError,
    ErrorCode,
    GenerationError,
    IngestError,
    StoreError,
)
from diffstory.core.logging import bind_request_id, configure_logging, unbind_request_id
from diffstory.core.progress import spinner, status

__all__ = [
    # Errors
    "ConfigError",
    "DiffstoryError",
    "ErrorCode",
    "GenerationError",
    "IngestError",
    "StoreError",
    # Logging
    "bind_request_id",
    "configure_logging",
    "unbind_request_id",
    # Progress
    "spinner",
    "status",
]
