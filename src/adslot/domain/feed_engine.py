"""FeedInjectionEngine: deterministic ad placement in a content list."""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable

from ..models.requests import ContentItem, FeedPlacement
from ..models.responses import FallbackAd, FeedItem
from .inventory import Ad, AdScope

DEFAULT_CADENCE = 3


def rank_ads(ads: Iterable[Ad]) -> list[Ad]:
    """Neighborhood-scoped ads outrank global ones; ties break by earliest start_date."""
    return sorted(
        ads,
        key=lambda ad: (
            0 if ad.is_neighborhood_scoped else 1,
            ad.start_date or date.max,
            ad.id,
        ),
    )


class FeedInjectionEngine:
    """Interleave paid (or fallback) ads without reordering content."""

    def __init__(self, cadence: int = DEFAULT_CADENCE) -> None:
        if cadence < 1:
            raise ValueError(f"cadence must be >= 1, got {cadence}")
        self._cadence = cadence

    @property
    def cadence(self) -> int:
        return self._cadence

    def eligible(self, ad_pool: Iterable[Ad], neighborhood_ids: list[str], on_date: date) -> list[Ad]:
        """Active ads running on ``on_date`` that are global or target one of the ids."""
        targets = set(neighborhood_ids)
        out: list[Ad] = []
        for ad in ad_pool:
            if not ad.runs_on(on_date):
                continue
            if ad.scope == AdScope.global_ or ad.neighborhood_id in targets:
                out.append(ad)
        return rank_ads(out)

    def inject(
        self,
        content: list[ContentItem],
        ad_pool: Iterable[Ad],
        neighborhood_ids: list[str],
        *,
        on_date: date,
        fallback: Callable[[], FallbackAd],
        placement: FeedPlacement = FeedPlacement.in_feed,
        position: int | None = None,
    ) -> list[FeedItem]:
        ranked = self.eligible(ad_pool, neighborhood_ids, on_date)
        picker = _AdPicker(ranked, fallback)

        if placement == FeedPlacement.story_open:
            return self._story_open(content, picker)
        if placement == FeedPlacement.at_position:
            if position is None:
                raise ValueError("at_position placement requires a position")
            return self._at_position(content, picker, position)
        return self._in_feed(content, picker)

    def _in_feed(self, content: list[ContentItem], picker: "_AdPicker") -> list[FeedItem]:
        items: list[FeedItem] = []
        for index, entry in enumerate(content, start=1):
            items.append(_content(entry, len(items)))
            if index % self._cadence == 0:
                items.append(picker.next("in_feed", len(items)))
        return items

    def _story_open(self, content: list[ContentItem], picker: "_AdPicker") -> list[FeedItem]:
        items = [picker.next("top", 0)]
        for entry in content:
            items.append(_content(entry, len(items)))
        # A single eligible ad is reused for the bottom slot.
        items.append(picker.next("bottom", len(items)))
        return items

    def _at_position(self, content: list[ContentItem], picker: "_AdPicker", position: int) -> list[FeedItem]:
        cut = min(position, len(content))
        items: list[FeedItem] = []
        for entry in content[:cut]:
            items.append(_content(entry, len(items)))
        items.append(picker.next("at_position", len(items)))
        for entry in content[cut:]:
            items.append(_content(entry, len(items)))
        return items


class _AdPicker:
    """Rotates through ranked ads, or hands out the fallback when there are none."""

    def __init__(self, ranked: list[Ad], fallback: Callable[[], FallbackAd]) -> None:
        self._ranked = ranked
        self._fallback_factory = fallback
        self._fallback: FallbackAd | None = None
        self._cursor = 0

    def next(self, slot: str, position: int) -> FeedItem:
        if not self._ranked:
            if self._fallback is None:
                self._fallback = self._fallback_factory()
            return FeedItem(kind="fallback", position=position, slot=slot, fallback=self._fallback)
        ad = self._ranked[self._cursor % len(self._ranked)]
        self._cursor += 1
        return FeedItem(kind="ad", position=position, slot=slot, ad=ad)


def _content(entry: ContentItem, position: int) -> FeedItem:
    return FeedItem(kind="content", position=position, content=entry)
