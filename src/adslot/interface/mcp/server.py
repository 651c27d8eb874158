"""MCP server factory.

The engine surface serves the rendering layer; the studio surface serves
operators. Each registers only its own tool set. The engine also exposes
read-only resources (neighborhood catalog, rate card) so a client can build
its booking UI without a tool call.
"""

from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from .tools import register_engine_tools, register_studio_tools

_SERVER_NAMES = {
    "engine": "adslot-engine",
    "studio": "adslot-studio",
}

CATALOG_URI = "adslot://catalog/neighborhoods"
RATES_URI = "adslot://pricing/rates"


def create_server(mode: str = "engine") -> FastMCP:
    """Build and return a configured FastMCP server.

    Args:
        mode: ``"engine"`` for availability, feed injection and checkout, or
            ``"studio"`` for inventory holds, ad review and reconciliation.
    """
    if mode not in _SERVER_NAMES:
        raise ValueError(f"Unknown MCP mode {mode!r}; expected 'engine' or 'studio'")

    server = FastMCP(_SERVER_NAMES[mode])
    if mode == "engine":
        register_engine_tools(server)
        _register_engine_resources(server)
    else:
        register_studio_tools(server)
    return server


def _register_engine_resources(server: FastMCP) -> None:
    @server.resource(CATALOG_URI, name="Neighborhood Catalog", mime_type="application/json")
    def neighborhood_catalog() -> str:
        """Sellable neighborhoods with city, tier and combo components."""
        from ...wiring import build_directory

        return json.dumps([n.model_dump(mode="json") for n in build_directory().all()], indent=2)

    @server.resource(RATES_URI, name="Rate Card", mime_type="application/json")
    def rate_card() -> str:
        """Price per tier and placement type, plus the global takeover rate, in minor currency units."""
        from ...config.runtime import get_settings
        from ...domain.pricing import PricingResolver

        settings = get_settings()
        resolver = PricingResolver(settings.price_table)
        return json.dumps(
            {
                "currency": settings.currency,
                "weekly_weekday": settings.weekly_weekday,
                "tiers": {str(tier): resolver.rates_for(tier) for tier in (1, 2, 3)},
                "takeover": resolver.takeover_rates(),
            },
            indent=2,
        )


if __name__ == "__main__":
    create_server("engine").run(transport="stdio")
