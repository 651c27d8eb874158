"""AdminService: inventory holds, house promotions, operator queue, order lookup."""

from __future__ import annotations

import logging
from datetime import date

from ..domain.errors import NeighborhoodNotFoundError, NotFoundError
from ..domain.inventory import HousePromotion, InventorySlot, OperatorTask, Order, PlacementType, SlotKey
from ..ports.clock import Clock, SystemClock
from ..ports.directory import NeighborhoodDirectory
from ..ports.inventory_store import InventoryStorePort

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        directory: NeighborhoodDirectory,
        store: InventoryStorePort,
        clock: Clock | None = None,
    ) -> None:
        self._directory = directory
        self._store = store
        self._clock = clock or SystemClock()

    def _key(self, neighborhood_id: str, day: date, placement_type: PlacementType | str) -> SlotKey:
        if self._directory.get_neighborhood(neighborhood_id) is None:
            raise NeighborhoodNotFoundError(neighborhood_id)
        return SlotKey(neighborhood_id=neighborhood_id, date=day, placement_type=PlacementType(placement_type))

    def block_slot(
        self,
        neighborhood_id: str,
        day: date,
        placement_type: PlacementType | str,
        note: str | None = None,
    ) -> InventorySlot:
        """Hold a slot out of sale. Raises ConflictError if it is already booked."""
        slot = self._store.block_slot(self._key(neighborhood_id, day, placement_type), note)
        logger.info(
            "slot_blocked",
            extra={"neighborhood_id": neighborhood_id, "date": day.isoformat(), "note": note},
        )
        return slot

    def unblock_slot(self, neighborhood_id: str, day: date, placement_type: PlacementType | str) -> bool:
        released = self._store.unblock_slot(self._key(neighborhood_id, day, placement_type))
        logger.info(
            "slot_unblocked",
            extra={"neighborhood_id": neighborhood_id, "date": day.isoformat(), "released": released},
        )
        return released

    def upsert_house_promotion(self, promotion: HousePromotion) -> HousePromotion:
        if promotion.neighborhood_id and self._directory.get_neighborhood(promotion.neighborhood_id) is None:
            raise NeighborhoodNotFoundError(promotion.neighborhood_id)
        self._store.upsert_house_promotion(promotion)
        return promotion

    def list_house_promotions(self, active_only: bool = False) -> list[HousePromotion]:
        return self._store.list_house_promotions(active_only=active_only)

    def list_tasks(self, open_only: bool = True) -> list[OperatorTask]:
        return self._store.list_tasks(open_only=open_only)

    def resolve_task(self, task_id: int) -> bool:
        resolved = self._store.resolve_task(task_id, self._clock.now())
        if resolved:
            logger.info("operator_task_resolved", extra={"task_id": task_id})
        return resolved

    def get_order(self, order_id: str) -> Order:
        order = self._store.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Unknown order: {order_id}")
        return order
