"""MCP server surfaces (engine and studio)."""

from .server import create_server

__all__ = ["create_server"]
