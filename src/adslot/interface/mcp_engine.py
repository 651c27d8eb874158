"""Engine entrypoint.

Starts the MCP Engine server (rendering layer: availability, feed, checkout).
Avoids importing the CLI or studio modules so it can serve as a minimal
container entrypoint.

Usage:
    python -m adslot.interface.mcp_engine
    # or via the script entrypoint:
    adslot-engine
"""

from __future__ import annotations

from .mcp.server import create_server


def main() -> None:
    from .mcp.auth import check_scope
    check_scope("engine")
    server = create_server(mode="engine")
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
