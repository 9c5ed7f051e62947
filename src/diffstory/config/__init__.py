"""Config module exports."""

from diffstory.config.loader import DiffstorySettings, load_config
from diffstory.config.models import (
    DiffstoryConfig,
    GenerateConfig,
    LoggingConfig,
    ServerConfig,
    StoreConfig,
    WatcherConfig,
)

__all__ = [
    "load_config",
    "DiffstoryConfig",
    "DiffstorySettings",
    "GenerateConfig",
    "LoggingConfig",
    "ServerConfig",
    "StoreConfig",
    "WatcherConfig",
]
