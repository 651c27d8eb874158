"""Start-up gate for the MCP surfaces.

When ``require_<mode>_key`` is enabled, the matching ``ADSLOT_<MODE>_KEY``
environment variable must be present before the server will start.
"""

from __future__ import annotations

import os

_KEY_ENV = {
    "engine": "ADSLOT_ENGINE_KEY",
    "studio": "ADSLOT_STUDIO_KEY",
}


def check_scope(mode: str) -> None:
    """Raise PermissionError if ``mode`` needs a key that is not set."""
    from ...config.runtime import get_settings

    if mode not in _KEY_ENV:
        raise ValueError(f"Unknown mode: {mode!r}")
    settings = get_settings()
    required = settings.require_studio_key if mode == "studio" else settings.require_engine_key
    if required and not os.environ.get(_KEY_ENV[mode]):
        raise PermissionError(f"{mode.capitalize()} requires {_KEY_ENV[mode]} to be set")
