"""MCP stdio endpoint."""

from diffstory.mcp.server import create_mcp_server, run_mcp_server

__all__ = ["create_mcp_server", "run_mcp_server"]
