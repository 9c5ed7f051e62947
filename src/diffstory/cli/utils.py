"""CLI utilities."""

from pathlib import Path

import click

from diffstory.config.loader import load_config
from diffstory.config.models import DiffstoryConfig, LoggingConfig, LogOutputConfig
from diffstory.core.errors import DiffstoryError
from diffstory.core.logging import configure_logging
from diffstory.storage.store import ReviewStore

DEBUG_LOG_FILE = "diffstory.log"

FILTER_CHOICE = click.Choice(["low", "medium", "high"], case_sensitive=False)


def load_cli_config(ctx: click.Context) -> DiffstoryConfig:
    """Load config for a command, turning config errors into a clean CLI failure."""
    obj = ctx.find_root().obj or {}
    try:
        return load_config(obj.get("config_path"))
    except DiffstoryError as e:
        raise click.ClickException(str(e)) from e


def open_store(config: DiffstoryConfig) -> ReviewStore:
    """Open the review store configured for this user."""
    base_dir = Path(config.store.base_dir).expanduser() if config.store.base_dir else None
    try:
        return ReviewStore(base_dir)
    except DiffstoryError as e:
        raise click.ClickException(str(e)) from e


def configure_cli_logging(
    ctx: click.Context,
    config: DiffstoryConfig,
    store: ReviewStore,
) -> Path | None:
    """Apply the configured log level, plus a JSON debug file when enabled.

    Returns:
        Path of the debug log file, or None when file logging is off.
    """
    obj = ctx.find_root().obj or {}
    verbose = bool(obj.get("verbose"))
    console_level = "DEBUG" if verbose else config.logging.level

    outputs = [
        output.model_copy(update={"level": output.level or console_level})
        for output in config.logging.outputs
    ]
    log_file: Path | None = None
    if verbose or config.debug_logging_enabled:
        log_file = store.base_dir / DEBUG_LOG_FILE
        outputs.append(LogOutputConfig(destination=str(log_file), format="json", level="DEBUG"))

    level = "DEBUG" if log_file is not None else console_level
    configure_logging(LoggingConfig(level=level, outputs=outputs))
    return log_file


def working_directory() -> Path:
    """The directory a command operates on."""
    return Path.cwd()
