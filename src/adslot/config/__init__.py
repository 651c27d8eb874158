"""Runtime configuration."""

from .runtime import McpMode, RuntimeSettings, get_settings

__all__ = ["McpMode", "RuntimeSettings", "get_settings"]
