"""MCP tool handlers."""

from diffstory.mcp.tools import review

__all__ = ["review"]
