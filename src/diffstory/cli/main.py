"""diffstory CLI - diffstory command."""

from pathlib import Path

import click

from diffstory import __version__
from diffstory.cli.clear import clear_command
from diffstory.cli.generate import generate_command
from diffstory.cli.mcp import mcp_command
from diffstory.cli.server import server_command
from diffstory.cli.show import show_command
from diffstory.cli.watch import watch_command
from diffstory.config.models import LoggingConfig
from diffstory.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="diffstory")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/diffstory/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """diffstory - Narrated code reviews, delivered to your terminal."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(LoggingConfig(level="DEBUG" if verbose else "INFO"))


cli.add_command(server_command, name="server")
cli.add_command(mcp_command, name="mcp")
cli.add_command(generate_command, name="generate")
cli.add_command(watch_command, name="watch")
cli.add_command(show_command, name="show")
cli.add_command(clear_command, name="clear")


if __name__ == "__main__":
    cli()
