"""Pydantic-based runtime settings for adslot services.

Loads from environment variables (with optional .env file).
Invalid values fail fast at startup.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from ..domain.pricing import PriceTable


class McpMode(str, Enum):
    engine = "engine"
    studio = "studio"


class RuntimeSettings(BaseSettings):
    """All configuration for the inventory engine, validated at startup."""

    model_config = {"env_prefix": "ADSLOT_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # --- Server mode ---
    mcp_mode: McpMode = Field(
        default=McpMode.engine,
        description="Which MCP surface to start: 'engine' (rendering layer) or 'studio' (operators)",
    )

    # --- Storage ---
    database_path: str = Field(default="data/adslot.db", description="SQLite path for inventory state")
    directory_path: str = Field(
        default="data/neighborhoods.json",
        description="JSON file backing the neighborhood directory",
    )

    # --- Calendar ---
    weekly_weekday: int = Field(
        default=6,
        ge=0,
        le=6,
        description="Day the weekly edition runs on (0=Monday .. 6=Sunday)",
    )
    booking_lead_hours: int = Field(default=48, ge=0, description="Minimum notice before an edition date")
    booking_max_days: int = Field(default=90, ge=1, description="Booking horizon in days")

    # --- Booking ---
    currency: str = Field(default="usd", min_length=3, max_length=3, description="ISO currency code")
    max_cart_items: int = Field(default=20, ge=1, le=200, description="Maximum items per cart")
    price_table: PriceTable = Field(default_factory=PriceTable, description="Tier x placement prices (JSON)")
    pending_order_timeout_minutes: int = Field(
        default=60,
        ge=1,
        description="Age after which unpaid orders are abandoned",
    )
    sweep_interval_seconds: float = Field(default=300.0, gt=0, description="Stale order sweep period")

    # --- Feed ---
    feed_cadence: int = Field(default=3, ge=1, le=50, description="Content items between in-feed ads")

    # --- Payments ---
    payment_provider: Literal["mock", "stripe"] = Field(default="mock", description="Payment processor adapter")
    stripe_secret_key: str = Field(
        default="",
        validation_alias=AliasChoices("ADSLOT_STRIPE_SECRET_KEY", "STRIPE_SECRET_KEY"),
    )
    stripe_webhook_secret: str = Field(
        default="",
        validation_alias=AliasChoices("ADSLOT_STRIPE_WEBHOOK_SECRET", "STRIPE_WEBHOOK_SECRET"),
    )
    stripe_api_base: str = Field(default="https://api.stripe.com/v1", description="Stripe REST base URL")
    checkout_success_url: str = Field(
        default="http://localhost:3000/advertise/success?session_id={CHECKOUT_SESSION_ID}",
    )
    checkout_cancel_url: str = Field(default="http://localhost:3000/advertise")

    # --- Auth (optional: require key for production) ---
    require_studio_key: bool = Field(default=False, description="If True, Studio requires ADSLOT_STUDIO_KEY env")
    require_engine_key: bool = Field(default=False, description="If True, Engine requires ADSLOT_ENGINE_KEY env")

    # --- Limits ---
    request_timeout_seconds: float = Field(default=30.0, gt=0, description="Outbound HTTP timeout")

    @field_validator("currency")
    @classmethod
    def _lower_currency(cls, v: str) -> str:
        if not v.isalpha():
            raise ValueError(f"currency must be an ISO code, got {v!r}")
        return v.lower()


@lru_cache(maxsize=1)
def get_settings() -> RuntimeSettings:
    """Return the singleton RuntimeSettings (cached after first call)."""
    return RuntimeSettings()
