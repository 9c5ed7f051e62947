"""diffstory server command - run the HTTP ingest endpoint."""

import asyncio

import click

from diffstory.cli.utils import configure_cli_logging, load_cli_config, open_store


@click.command()
@click.option("--port", "-p", type=int, help="Override server port (0 picks a free one)")
@click.pass_context
def server_command(ctx: click.Context, port: int | None) -> None:
    """Accept reviews over HTTP on the loopback interface.

    Runs in the foreground until interrupted. Reviews are POSTed as JSON
    to /review and written to the review store, where a running
    `diffstory watch` picks them up.
    """
    from diffstory.config.loader import merge_overrides
    from diffstory.core.errors import DiffstoryError
    from diffstory.review.service import ReviewService
    from diffstory.server.lifecycle import run_server

    config = load_cli_config(ctx)
    if port is not None:
        try:
            config = merge_overrides(config, {"server": {"port": port}})
        except DiffstoryError as e:
            raise click.ClickException(str(e)) from e

    store = open_store(config)
    configure_cli_logging(ctx, config, store)

    try:
        asyncio.run(run_server(ReviewService(store), config))
    except OSError as e:
        raise click.ClickException(f"Failed to start server: {e}") from e
    except KeyboardInterrupt:
        click.echo("\nStopped", err=True)
