"""Inventory, order and ad domain models."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


def _normalize_dt(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Slot and order-line id of a global takeover; never a directory id.
GLOBAL_TAKEOVER_ID = "*"


class PlacementType(str, Enum):
    """Recurring publication unit an ad is attached to."""

    daily = "daily"     # Daily Brief
    weekly = "weekly"   # Sunday Edition


class SlotState(str, Enum):
    open = "open"
    booked = "booked"
    blocked = "blocked"


class OrderStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    abandoned = "abandoned"


class AdStatus(str, Enum):
    pending_review = "pending_review"
    approved = "approved"
    active = "active"
    paused = "paused"
    rejected = "rejected"


class AdScope(str, Enum):
    global_ = "global"
    neighborhood = "neighborhood"


class Neighborhood(BaseModel):
    """A sellable neighborhood as resolved by the directory."""

    id: str = Field(..., min_length=1, description="Neighborhood identifier (slug)")
    name: str = Field(..., description="Display name")
    city: str = Field(..., description="City the neighborhood belongs to")
    tier: Literal[1, 2, 3] = Field(..., description="Pricing tier")
    is_combo: bool = Field(default=False, description="Whether this aggregates components")
    component_ids: list[str] = Field(
        default_factory=list, description="Ordered component ids (combo only)"
    )

    @model_validator(mode="after")
    def _combo_shape(self) -> "Neighborhood":
        if self.id == GLOBAL_TAKEOVER_ID:
            raise ValueError(f"{GLOBAL_TAKEOVER_ID!r} is reserved for global takeovers")
        if self.is_combo and not self.component_ids:
            raise ValueError(f"combo neighborhood {self.id!r} has no components")
        if not self.is_combo and self.component_ids:
            raise ValueError(f"neighborhood {self.id!r} lists components but is not a combo")
        if self.id in self.component_ids:
            raise ValueError(f"combo neighborhood {self.id!r} lists itself as a component")
        return self


class SlotKey(BaseModel):
    """Identity of one sellable unit of inventory."""

    model_config = {"frozen": True}

    neighborhood_id: str
    date: date
    placement_type: PlacementType

    def sort_key(self) -> tuple[str, date, str]:
        return (self.neighborhood_id, self.date, self.placement_type.value)

    @property
    def is_takeover(self) -> bool:
        return self.neighborhood_id == GLOBAL_TAKEOVER_ID


class InventorySlot(BaseModel):
    """Stored slot row. Absence of a row means the slot is open."""

    neighborhood_id: str
    date: date
    placement_type: PlacementType
    state: SlotState
    order_id: str | None = None
    note: str | None = None

    @property
    def key(self) -> SlotKey:
        return SlotKey(
            neighborhood_id=self.neighborhood_id,
            date=self.date,
            placement_type=self.placement_type,
        )


class OrderLine(BaseModel):
    """One (neighborhood, date, placement) purchase within an order."""

    id: str
    order_id: str
    neighborhood_id: str
    date: date
    placement_type: PlacementType
    unit_price_cents: int = Field(..., gt=0)
    activation_error: str | None = None

    @property
    def is_takeover(self) -> bool:
        return self.neighborhood_id == GLOBAL_TAKEOVER_ID

    @property
    def key(self) -> SlotKey:
        return SlotKey(
            neighborhood_id=self.neighborhood_id,
            date=self.date,
            placement_type=self.placement_type,
        )


class Order(BaseModel):
    """One purchase transaction. Never deleted."""

    id: str
    status: OrderStatus = OrderStatus.pending
    total_cents: int = Field(..., ge=0)
    currency: str = "usd"
    contact_email: str
    session_id: str | None = None
    created_at: datetime
    paid_at: datetime | None = None
    lines: list[OrderLine] = Field(default_factory=list)

    @field_validator("created_at", "paid_at")
    @classmethod
    def _ensure_tz(cls, value: datetime | None) -> datetime | None:
        return _normalize_dt(value)


class Creative(BaseModel):
    """Advertiser-supplied creative."""

    headline: str = Field(default="", max_length=200)
    body: str = Field(default="", max_length=2000)
    image_url: str = Field(default="")
    click_url: str = Field(default="")
    sponsor_label: str = Field(default="", max_length=100)


class Ad(BaseModel):
    """Creative plus targeting, bound to a booked window once paid."""

    id: str
    order_line_id: str | None = None
    status: AdStatus = AdStatus.pending_review
    scope: AdScope = AdScope.neighborhood
    neighborhood_id: str | None = None
    placement_type: PlacementType = PlacementType.daily
    start_date: date | None = None
    end_date: date | None = None
    paid: bool = False
    creative: Creative = Field(default_factory=Creative)
    status_reason: str | None = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _ensure_tz(cls, value: datetime) -> datetime:
        return _normalize_dt(value)

    @model_validator(mode="after")
    def _scope_target(self) -> "Ad":
        if self.scope == AdScope.neighborhood and not self.neighborhood_id:
            raise ValueError("neighborhood-scoped ad requires neighborhood_id")
        return self

    @property
    def is_neighborhood_scoped(self) -> bool:
        return self.scope == AdScope.neighborhood

    def runs_on(self, day: date) -> bool:
        """True if the ad is live and its campaign window covers ``day``."""
        if self.status != AdStatus.active:
            return False
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= day <= self.end_date


class HousePromotion(BaseModel):
    """Non-purchased filler unit used by the fallback cascade."""

    id: str
    headline: str
    body: str = ""
    click_url: str
    image_url: str = ""
    scope: Literal["neighborhood", "city", "global"] = "global"
    neighborhood_id: str | None = None
    city: str | None = None
    weight: int = Field(default=1, ge=0)
    active: bool = True
    audience: Literal["all", "anonymous"] = "all"

    @model_validator(mode="after")
    def _scope_target(self) -> "HousePromotion":
        if self.scope == "neighborhood" and not self.neighborhood_id:
            raise ValueError("neighborhood promotion requires neighborhood_id")
        if self.scope == "city" and not self.city:
            raise ValueError("city promotion requires city")
        return self


class OperatorTask(BaseModel):
    """Item in the operator reconciliation queue."""

    id: int | None = None
    kind: Literal[
        "payment_mismatch",
        "unknown_session",
        "activation_failed",
        "late_payment_conflict",
        "paid_ad_rejected",
    ]
    order_id: str | None = None
    session_id: str | None = None
    detail: str = ""
    created_at: datetime
    resolved_at: datetime | None = None

    @field_validator("created_at", "resolved_at")
    @classmethod
    def _ensure_tz(cls, value: datetime | None) -> datetime | None:
        return _normalize_dt(value)
