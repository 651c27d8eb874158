"""FallbackAdSelector: house promotion cascade for unsold slots."""

from __future__ import annotations

from typing import Iterable

from ..models.requests import FallbackContext
from ..models.responses import FallbackAd
from .inventory import HousePromotion, Neighborhood

DEFAULT_FALLBACK = FallbackAd(
    source="default",
    headline="Advertise in your neighborhood",
    body="Your brand, native in the most-read local morning brief.",
    click_url="/advertise",
    sponsor_label="House",
)


class FallbackAdSelector:
    """Pick a house unit: neighborhood, then city, then global, then the default.

    Always returns a value.
    """

    def __init__(self, default: FallbackAd | None = None) -> None:
        self._default = default or DEFAULT_FALLBACK

    def select(
        self,
        neighborhood: Neighborhood | None,
        promotions: Iterable[HousePromotion],
        context: FallbackContext | None = None,
    ) -> FallbackAd:
        context = context or FallbackContext()
        usable = [p for p in promotions if self._usable(p, context)]

        if neighborhood is not None:
            local = [p for p in usable if p.scope == "neighborhood" and p.neighborhood_id == neighborhood.id]
            if local:
                return _to_fallback(_best(local), "neighborhood")
            city = [p for p in usable if p.scope == "city" and p.city == neighborhood.city]
            if city:
                return _to_fallback(_best(city), "city")

        global_units = [p for p in usable if p.scope == "global"]
        if global_units:
            return _to_fallback(_best(global_units), "global")
        return self._default

    @staticmethod
    def _usable(promotion: HousePromotion, context: FallbackContext) -> bool:
        if not promotion.active:
            return False
        # Sign-up style units are only for anonymous readers.
        if promotion.audience == "anonymous" and context.authenticated:
            return False
        return True


def _best(promotions: list[HousePromotion]) -> HousePromotion:
    return sorted(promotions, key=lambda p: (-p.weight, p.id))[0]


def _to_fallback(promotion: HousePromotion, source: str) -> FallbackAd:
    return FallbackAd(
        source=source,
        promotion_id=promotion.id,
        headline=promotion.headline,
        body=promotion.body,
        click_url=promotion.click_url,
        image_url=promotion.image_url,
    )
