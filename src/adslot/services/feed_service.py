"""FeedService: resolve the ad pool for a render and interleave it with content."""

from __future__ import annotations

import logging
from datetime import date

from ..domain.fallback import FallbackAdSelector
from ..domain.feed_engine import FeedInjectionEngine
from ..domain.filters import AdFilter, FieldFilter, FilterOp
from ..domain.inventory import Ad, AdStatus
from ..models.requests import FallbackContext, FeedRequest
from ..models.responses import FallbackAd, FeedItem
from ..ports.clock import Clock, SystemClock
from ..ports.directory import NeighborhoodDirectory
from ..ports.inventory_store import InventoryStorePort

logger = logging.getLogger(__name__)


class FeedService:
    def __init__(
        self,
        directory: NeighborhoodDirectory,
        store: InventoryStorePort,
        engine: FeedInjectionEngine | None = None,
        selector: FallbackAdSelector | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._directory = directory
        self._store = store
        self._engine = engine or FeedInjectionEngine()
        self._selector = selector or FallbackAdSelector()
        self._clock = clock or SystemClock()

    def eligible_neighborhood_ids(self, neighborhood_id: str) -> list[str]:
        """Targets whose ads may render on ``neighborhood_id``'s feed.

        A combo shows ads for itself and its components; a component also
        shows ads bought for any combo containing it.
        """
        neighborhood = self._directory.get_neighborhood(neighborhood_id)
        if neighborhood is None:
            return [neighborhood_id]
        if neighborhood.is_combo:
            return [neighborhood.id, *self._directory.list_components(neighborhood.id)]
        return [neighborhood.id, *self._directory.combos_containing(neighborhood.id)]

    def active_ads(self, on_date: date, context: FallbackContext | None = None) -> list[Ad]:
        ad_filter = AdFilter(
            must=[
                FieldFilter(field="status", op=FilterOp.equals, value=AdStatus.active.value),
                FieldFilter(field="start_date", op=FilterOp.lte, value=on_date),
                FieldFilter(field="end_date", op=FilterOp.gte, value=on_date),
            ]
        )
        if context is not None and context.placement_type is not None:
            ad_filter = ad_filter.where("placement_type", FilterOp.equals, context.placement_type.value)
        return self._store.query_ads(ad_filter)

    def inject_ads(self, request: FeedRequest) -> list[FeedItem]:
        on_date = request.on_date or self._clock.now().date()
        targets = self.eligible_neighborhood_ids(request.neighborhood_id)
        pool = self.active_ads(on_date, request.context)

        items = self._engine.inject(
            request.content,
            pool,
            targets,
            on_date=on_date,
            fallback=lambda: self.select_fallback(request.neighborhood_id, request.context),
            placement=request.placement,
            position=request.position,
        )
        logger.debug(
            "feed_injected",
            extra={
                "neighborhood_id": request.neighborhood_id,
                "placement": request.placement.value,
                "content": len(request.content),
                "ads": sum(1 for i in items if i.kind == "ad"),
                "fallbacks": sum(1 for i in items if i.kind == "fallback"),
            },
        )
        return items

    def select_fallback(self, neighborhood_id: str | None, context: FallbackContext | None = None) -> FallbackAd:
        neighborhood = self._directory.get_neighborhood(neighborhood_id) if neighborhood_id else None
        promotions = self._store.list_house_promotions(active_only=True)
        return self._selector.select(neighborhood, promotions, context)
