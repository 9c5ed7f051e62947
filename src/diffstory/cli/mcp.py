"""diffstory mcp command - run the stdio MCP endpoint."""

import click

from diffstory.cli.utils import load_cli_config, open_store


@click.command()
@click.pass_context
def mcp_command(ctx: click.Context) -> None:
    """Serve the submit_review tool over MCP on stdin/stdout.

    Meant to be launched by an MCP client, e.g.:

        claude mcp add diffstory -- diffstory mcp
    """
    from diffstory.mcp.server import run_mcp_server

    config = load_cli_config(ctx)
    store = open_store(config)
    run_mcp_server(store, config)
