"""Port: persistent inventory, order and ad storage."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from ..domain.filters import AdFilter, SlotFilter
from ..domain.inventory import (
    Ad,
    HousePromotion,
    InventorySlot,
    OperatorTask,
    Order,
    SlotKey,
)


@runtime_checkable
class InventoryStorePort(Protocol):
    """Read/write interface for inventory state.

    ``reserve_order`` and ``revive_order`` are the only ways a slot becomes
    booked; both are all-or-nothing across every line of the order.
    """

    # --- slots ---

    def query_slots(self, slot_filter: SlotFilter) -> list[InventorySlot]: ...

    def block_slot(self, key: SlotKey, note: str | None = None) -> InventorySlot: ...

    def unblock_slot(self, key: SlotKey) -> bool: ...

    # --- orders ---

    def reserve_order(self, order: Order, ads: list[Ad], guard_keys: list[SlotKey]) -> None: ...

    def attach_session(self, order_id: str, session_id: str) -> None: ...

    def release_order(self, order_id: str) -> int: ...

    def get_order(self, order_id: str) -> Order | None: ...

    def get_order_by_session(self, session_id: str) -> Order | None: ...

    def mark_order_paid(self, order_id: str, paid_at: datetime) -> bool: ...

    def revive_order(self, order_id: str, paid_at: datetime, guard_keys: list[SlotKey]) -> bool: ...

    def expire_pending_orders(self, cutoff: datetime) -> list[tuple[str, int]]: ...

    def flag_line(self, line_id: str, error: str) -> None: ...

    # --- ads ---

    def get_ad(self, ad_id: str) -> Ad | None: ...

    def get_ad_for_line(self, line_id: str) -> Ad | None: ...

    def query_ads(self, ad_filter: AdFilter) -> list[Ad]: ...

    def save_ad(self, ad: Ad) -> None: ...

    # --- house promotions ---

    def list_house_promotions(self, active_only: bool = True) -> list[HousePromotion]: ...

    def upsert_house_promotion(self, promotion: HousePromotion) -> None: ...

    # --- operator queue ---

    def enqueue_task(self, task: OperatorTask) -> OperatorTask: ...

    def list_tasks(self, open_only: bool = True) -> list[OperatorTask]: ...

    def resolve_task(self, task_id: int, resolved_at: datetime) -> bool: ...
