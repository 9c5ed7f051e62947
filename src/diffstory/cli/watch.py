"""diffstory watch command - live view of the current directory's review."""

import asyncio
from pathlib import Path

import click

from diffstory.cli.utils import (
    FILTER_CHOICE,
    configure_cli_logging,
    load_cli_config,
    open_store,
    working_directory,
)
from diffstory.core.progress import get_console, status, suppress_console_logs
from diffstory.viewer.filter import FilterLevel
from diffstory.viewer.follow import follow
from diffstory.viewer.render import render_review


@click.command()
@click.option("--filter", "-f", "filter_name", type=FILTER_CHOICE, default=None,
              help="Minimum importance to show (default from config)")
@click.option(
    "--review",
    "review_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Show a review file instead of following the store",
)
@click.pass_context
def watch_command(ctx: click.Context, filter_name: str | None, review_file: Path | None) -> None:
    """Show the review for this directory and redraw it whenever it changes.

    Runs until interrupted. Reviews arrive from `diffstory server`,
    `diffstory mcp` or `diffstory generate`.
    """
    from diffstory.core.errors import DiffstoryError
    from diffstory.storage.store import load_review_file
    from diffstory.watcher.watcher import ReviewWatcher

    config = load_cli_config(ctx)
    level = FilterLevel(filter_name or config.generate.default_filter_level)
    console = get_console()

    if review_file is not None:
        try:
            review = load_review_file(review_file)
        except DiffstoryError as e:
            status(e.message, style="error")
            raise SystemExit(1) from e
        console.print(render_review(review, level))
        return

    store = open_store(config)
    configure_cli_logging(ctx, config, store)
    watcher = ReviewWatcher(
        working_directory=str(working_directory()),
        store=store,
        debounce_ms=config.watcher.debounce_ms,
        step_ms=config.watcher.step_ms,
    )

    async def _run() -> None:
        async with watcher:
            await follow(watcher, console, level)

    try:
        with suppress_console_logs():
            asyncio.run(_run())
    except KeyboardInterrupt:
        click.echo("\nStopped", err=True)
