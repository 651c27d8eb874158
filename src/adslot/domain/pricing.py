"""Tier pricing for placements."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from .inventory import Neighborhood, PlacementType


class TierRates(BaseModel):
    """Prices for one tier, in minor currency units."""

    daily: int = Field(..., gt=0, description="Daily Brief price in cents")
    weekly: int = Field(..., gt=0, description="Sunday Edition price in cents")

    @model_validator(mode="after")
    def _weekly_is_scarcer(self) -> "TierRates":
        if self.weekly <= self.daily:
            raise ValueError(
                f"weekly price ({self.weekly}) must exceed daily price ({self.daily})"
            )
        return self

    def for_placement(self, placement_type: PlacementType) -> int:
        if placement_type == PlacementType.weekly:
            return self.weekly
        return self.daily


def _default_tiers() -> dict[int, TierRates]:
    return {
        1: TierRates(daily=10_000, weekly=15_000),
        2: TierRates(daily=15_000, weekly=22_500),
        3: TierRates(daily=20_000, weekly=30_000),
    }


class PriceTable(BaseModel):
    """3x2 table of (tier, placement type) prices plus the global takeover rate."""

    tiers: dict[int, TierRates] = Field(default_factory=_default_tiers)
    takeover: TierRates = Field(
        default_factory=lambda: TierRates(daily=1_000_000, weekly=1_500_000),
        description="Global takeover price per placement type",
    )

    @model_validator(mode="after")
    def _all_tiers(self) -> "PriceTable":
        missing = {1, 2, 3} - set(self.tiers)
        extra = set(self.tiers) - {1, 2, 3}
        if missing:
            raise ValueError(f"price table missing tiers: {sorted(missing)}")
        if extra:
            raise ValueError(f"price table has unknown tiers: {sorted(extra)}")
        return self


class PricingResolver:
    """Resolve prices server-side. Client-supplied prices are never trusted."""

    def __init__(self, table: PriceTable | None = None) -> None:
        self._table = table or PriceTable()

    @property
    def table(self) -> PriceTable:
        return self._table

    def price_cents(self, tier: int, placement_type: PlacementType) -> int:
        try:
            rates = self._table.tiers[tier]
        except KeyError:
            raise ValueError(f"unknown tier: {tier}") from None
        return rates.for_placement(PlacementType(placement_type))

    def price_for(self, neighborhood: Neighborhood, placement_type: PlacementType) -> int:
        # Combos carry their own tier; components are not aggregated.
        return self.price_cents(neighborhood.tier, placement_type)

    def rates_for(self, tier: int) -> dict[str, int]:
        return {p.value: self.price_cents(tier, p) for p in PlacementType}

    def takeover_price(self, placement_type: PlacementType) -> int:
        return self._table.takeover.for_placement(PlacementType(placement_type))

    def takeover_rates(self) -> dict[str, int]:
        return {p.value: self.takeover_price(p) for p in PlacementType}
