"""Studio entrypoint.

Starts the MCP Studio server (operators: inventory holds, ad review,
manual confirmation, sweep, reconciliation queue).

Usage:
    python -m adslot.interface.mcp_studio
    # or:
    adslot-studio
"""

from __future__ import annotations

from .mcp.auth import check_scope
from .mcp.server import create_server


def main() -> None:
    check_scope("studio")
    server = create_server(mode="studio")
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
