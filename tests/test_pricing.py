"""Tests for the PricingResolver and price table validation."""

import pytest
from pydantic import ValidationError

from adslot.domain.inventory import Neighborhood, PlacementType
from adslot.domain.pricing import PriceTable, PricingResolver, TierRates


def test_default_table_prices():
    resolver = PricingResolver()
    assert resolver.price_cents(1, PlacementType.daily) == 10_000
    assert resolver.price_cents(2, PlacementType.daily) == 15_000
    assert resolver.price_cents(3, PlacementType.weekly) == 30_000


def test_weekly_price_exceeds_daily_for_every_tier():
    resolver = PricingResolver()
    for tier in (1, 2, 3):
        rates = resolver.rates_for(tier)
        assert rates["weekly"] > rates["daily"]


def test_weekly_not_above_daily_is_rejected():
    with pytest.raises(ValidationError):
        TierRates(daily=10_000, weekly=10_000)


def test_non_positive_price_is_rejected():
    with pytest.raises(ValidationError):
        TierRates(daily=0, weekly=100)


def test_table_requires_all_three_tiers():
    with pytest.raises(ValidationError):
        PriceTable(tiers={1: TierRates(daily=1, weekly=2), 2: TierRates(daily=1, weekly=2)})


def test_table_rejects_unknown_tier():
    tiers = {t: TierRates(daily=1, weekly=2) for t in (1, 2, 3, 4)}
    with pytest.raises(ValidationError):
        PriceTable(tiers=tiers)


def test_unknown_tier_lookup_raises():
    with pytest.raises(ValueError):
        PricingResolver().price_cents(7, PlacementType.daily)


def test_combo_uses_its_own_tier():
    combo = Neighborhood(
        id="downtown",
        name="Downtown",
        city="New York",
        tier=3,
        is_combo=True,
        component_ids=["tribeca", "soho"],
    )
    assert PricingResolver().price_for(combo, PlacementType.daily) == 20_000


def test_custom_table():
    table = PriceTable(
        tiers={
            1: TierRates(daily=500, weekly=900),
            2: TierRates(daily=400, weekly=800),
            3: TierRates(daily=300, weekly=700),
        }
    )
    resolver = PricingResolver(table)
    assert resolver.rates_for(2) == {"daily": 400, "weekly": 800}


def test_takeover_rates():
    resolver = PricingResolver()
    assert resolver.takeover_price(PlacementType.daily) == 1_000_000
    assert resolver.takeover_rates() == {"daily": 1_000_000, "weekly": 1_500_000}


def test_takeover_weekly_premium_enforced():
    with pytest.raises(ValidationError):
        PriceTable(takeover={"daily": 500, "weekly": 500})
