"""diffstory show command - print the stored review once."""

from pathlib import Path

import click

from diffstory.cli.utils import FILTER_CHOICE, load_cli_config, open_store, working_directory
from diffstory.core.errors import DiffstoryError, ErrorCode
from diffstory.core.progress import get_console, status
from diffstory.model.review import Review
from diffstory.storage.store import load_review_file
from diffstory.viewer.filter import FilterLevel
from diffstory.viewer.render import render_review


def _load(review_file: Path | None, ctx: click.Context) -> Review:
    if review_file is not None:
        return load_review_file(review_file)
    store = open_store(load_cli_config(ctx))
    return store.read(working_directory())


@click.command()
@click.option("--filter", "-f", "filter_name", type=FILTER_CHOICE, default=None,
              help="Minimum importance to show (default from config)")
@click.option(
    "--file",
    "review_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Render this review file instead of the stored one",
)
@click.pass_context
def show_command(ctx: click.Context, filter_name: str | None, review_file: Path | None) -> None:
    """Render the review stored for the current directory."""
    config = load_cli_config(ctx)
    level = FilterLevel(filter_name or config.generate.default_filter_level)

    try:
        review = _load(review_file, ctx)
    except DiffstoryError as e:
        if e.code == ErrorCode.NOT_FOUND:
            status(f"No review for {working_directory()}", style="warning")
        else:
            status(e.message, style="error")
        raise SystemExit(1) from e

    get_console().print(render_review(review, level))
