"""Tests for RuntimeSettings env loading and validation."""

import json

import pytest
from pydantic import ValidationError

from adslot.config.runtime import McpMode, RuntimeSettings
from adslot.domain.inventory import PlacementType


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("STRIPE_SECRET_KEY", "ADSLOT_STRIPE_SECRET_KEY", "ADSLOT_PRICE_TABLE", "ADSLOT_MCP_MODE"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = RuntimeSettings(_env_file=None)
    assert settings.mcp_mode == McpMode.engine
    assert settings.weekly_weekday == 6
    assert settings.booking_lead_hours == 48
    assert settings.booking_max_days == 90
    assert settings.payment_provider == "mock"
    assert settings.price_table.tiers[3].for_placement(PlacementType.weekly) == 30_000


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("ADSLOT_MCP_MODE", "studio")
    monkeypatch.setenv("ADSLOT_FEED_CADENCE", "5")
    settings = RuntimeSettings(_env_file=None)
    assert settings.mcp_mode == McpMode.studio
    assert settings.feed_cadence == 5


def test_price_table_from_json(monkeypatch):
    table = {
        "tiers": {
            "1": {"daily": 100, "weekly": 200},
            "2": {"daily": 300, "weekly": 400},
            "3": {"daily": 500, "weekly": 600},
        }
    }
    monkeypatch.setenv("ADSLOT_PRICE_TABLE", json.dumps(table))
    settings = RuntimeSettings(_env_file=None)
    assert settings.price_table.tiers[2].daily == 300


def test_price_table_requires_weekly_premium():
    with pytest.raises(ValidationError):
        RuntimeSettings(
            _env_file=None,
            price_table={"tiers": {1: {"daily": 5, "weekly": 5}, 2: {"daily": 1, "weekly": 2}, 3: {"daily": 1, "weekly": 2}}},
        )


def test_invalid_weekday_rejected():
    with pytest.raises(ValidationError):
        RuntimeSettings(_env_file=None, weekly_weekday=7)


def test_stripe_key_alias(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    assert RuntimeSettings(_env_file=None).stripe_secret_key == "sk_test_123"


def test_currency_lowercased():
    assert RuntimeSettings(_env_file=None, currency="SEK").currency == "sek"
    with pytest.raises(ValidationError):
        RuntimeSettings(_env_file=None, currency="U$D")
