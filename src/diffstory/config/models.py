"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DIFFSTORY__SECTION__KEY)
3. User YAML ($XDG_CONFIG_HOME/diffstory/config.yaml or ~/.config/diffstory/config.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    DIFFSTORY__<SECTION>__<KEY>=<VALUE>

Examples:
    DIFFSTORY__LOGGING__LEVEL=DEBUG
    DIFFSTORY__SERVER__PORT=9000
    DIFFSTORY__GENERATE__LLM_COMMAND='["llm", "-m", "gpt-4o"]'
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
FilterLevelName = Literal["low", "medium", "high"]

DEFAULT_DIFF_COMMAND = ["git", "diff", "HEAD", "--no-color", "--no-ext-diff"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v == "stderr":
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DIFFSTORY__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG is verbose.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """HTTP ingest server configuration.

    The server always binds loopback; only the port is configurable.

    Env vars:
        DIFFSTORY__SERVER__PORT: Port number (default: 8765, 0 = ephemeral)
    """

    port: int = Field(
        default=8765,
        description="Server port. 0 picks a free ephemeral port.",
    )
    max_body_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted request body size.",
    )
    read_timeout_sec: float = Field(default=5.0)
    write_timeout_sec: float = Field(default=5.0)
    idle_timeout_sec: float = Field(default=30.0)
    shutdown_timeout_sec: float = Field(
        default=5.0,
        description="Graceful shutdown drain timeout.",
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (0 <= v <= 65535):
            raise ValueError(f"Port must be 0-65535, got {v}")
        return v


class StoreConfig(BaseModel):
    """Review store configuration.

    Env vars:
        DIFFSTORY__STORE__BASE_DIR: Override where review files are written
    """

    base_dir: str | None = Field(
        default=None,
        description="Directory for review files. Default: user cache dir / diffstory.",
    )


class WatcherConfig(BaseModel):
    """Review watcher configuration."""

    debounce_ms: int = Field(
        default=50,
        description="Window for grouping filesystem events into one batch.",
    )
    step_ms: int = Field(
        default=50,
        description="How often the native watcher is polled for new events.",
    )


class GenerateConfig(BaseModel):
    """LLM generation configuration.

    Env vars:
        DIFFSTORY__GENERATE__LLM_COMMAND: JSON list, e.g. '["claude", "-p"]'
        DIFFSTORY__GENERATE__DIFF_COMMAND: JSON list
        DIFFSTORY__GENERATE__DEFAULT_FILTER_LEVEL: low, medium or high
    """

    llm_command: list[str] = Field(
        default_factory=list,
        description="LLM command argv; the prompt is appended as the final argument. "
        "Empty means: use 'claude -p' when it is on PATH.",
    )
    diff_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DIFF_COMMAND),
        description="Diff producer argv run in the working directory.",
    )
    default_filter_level: FilterLevelName = Field(
        default="medium",
        description="Initial importance filter for the viewer.",
    )

    @field_validator("diff_command")
    @classmethod
    def validate_diff_command(cls, v: list[str]) -> list[str]:
        return v or list(DEFAULT_DIFF_COMMAND)


class DiffstoryConfig(BaseModel):
    """Root configuration for diffstory."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    generate: GenerateConfig = Field(default_factory=GenerateConfig)
    debug_logging_enabled: bool = Field(
        default=False,
        description="Write a DEBUG-level JSON log file next to the review store.",
    )
