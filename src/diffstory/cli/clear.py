"""diffstory clear command - remove the stored review for this directory."""

import click
import questionary

from diffstory.cli.utils import load_cli_config, open_store, working_directory
from diffstory.core.errors import DiffstoryError
from diffstory.core.progress import status


@click.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def clear_command(ctx: click.Context, yes: bool) -> None:
    """Delete the review stored for the current directory.

    A running `diffstory watch` goes back to waiting for a review.
    """
    store = open_store(load_cli_config(ctx))
    cwd = working_directory()

    try:
        path = store.path_for_directory(cwd)
    except DiffstoryError as e:
        raise click.ClickException(str(e)) from e

    if not path.exists():
        status(f"Nothing to clear - no review for {cwd}", style="warning")
        return

    if not yes:
        answer = questionary.confirm(f"Delete the review at {path}?", default=False).ask()
        if not answer:
            status("Cancelled", style="none")
            return

    try:
        store.delete(cwd)
    except DiffstoryError as e:
        status(e.message, style="error")
        raise SystemExit(1) from e
    status(f"Removed {path}", style="success")
