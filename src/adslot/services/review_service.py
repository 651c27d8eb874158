"""ReviewService: operator transitions on the ad lifecycle."""

from __future__ import annotations

import logging

from ..domain import ad_lifecycle
from ..domain.errors import NotFoundError
from ..domain.filters import AdFilter, FilterOp
from ..domain.inventory import Ad, AdStatus, Creative, OperatorTask
from ..ports.clock import Clock, SystemClock
from ..ports.inventory_store import InventoryStorePort

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, store: InventoryStorePort, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def get_ad(self, ad_id: str) -> Ad:
        ad = self._store.get_ad(ad_id)
        if ad is None:
            raise NotFoundError(f"Unknown ad: {ad_id}")
        return ad

    def review_queue(self) -> list[Ad]:
        return self._store.query_ads(AdFilter().where("status", FilterOp.equals, AdStatus.pending_review.value))

    def submit_creative(self, ad_id: str, creative: Creative) -> Ad:
        return self._save(ad_lifecycle.submit_creative(self.get_ad(ad_id), creative), "creative_submitted")

    def approve(self, ad_id: str) -> Ad:
        return self._save(ad_lifecycle.approve(self.get_ad(ad_id)), "ad_approved")

    def reject(self, ad_id: str, reason: str) -> Ad:
        ad = self.get_ad(ad_id)
        rejected = self._save(ad_lifecycle.reject(ad, reason), "ad_rejected")
        if ad.paid:
            # Inventory stays booked; refunding is an operator decision.
            self._store.enqueue_task(
                OperatorTask(
                    kind="paid_ad_rejected",
                    detail=f"ad {ad.id} rejected after payment: {rejected.status_reason}",
                    created_at=self._clock.now(),
                )
            )
        return rejected

    def pause(self, ad_id: str) -> Ad:
        return self._save(ad_lifecycle.pause(self.get_ad(ad_id)), "ad_paused")

    def resume(self, ad_id: str) -> Ad:
        return self._save(ad_lifecycle.resume(self.get_ad(ad_id)), "ad_resumed")

    def _save(self, ad: Ad, event: str) -> Ad:
        self._store.save_ad(ad)
        logger.info(event, extra={"ad_id": ad.id, "status": ad.status.value})
        return ad
