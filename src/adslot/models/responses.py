"""Response DTOs for the booking, availability and feed surfaces."""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field

from ..domain.inventory import Ad, OrderStatus, PlacementType
from ..domain.schedule import Month, placement_allowed_on
from .requests import CartItem, ContentItem


class AvailabilityView(BaseModel):
    """Calendar data for one neighborhood (or the global takeover), placement and month."""

    neighborhood_id: str | None = Field(default=None, description="None for the takeover calendar")
    placement_type: PlacementType
    month: str
    tier: int | None = None
    price: dict[str, int] = Field(..., description="Price per placement type, in cents")
    booked_dates: list[date] = Field(default_factory=list)
    blocked_dates: list[date] = Field(default_factory=list)
    min_date: date
    max_date: date
    weekly_weekday: int = Field(..., ge=0, le=6)

    def is_bookable(self, day: date) -> bool:
        """Stored state plus the implicit weekly-day and booking-window filters."""
        if day in self.booked_dates or day in self.blocked_dates:
            return False
        if not self.min_date <= day <= self.max_date:
            return False
        return placement_allowed_on(self.placement_type, day, self.weekly_weekday)

    def bookable_dates(self) -> list[date]:
        return [d for d in Month.parse(self.month).days() if self.is_bookable(d)]


class PricedLine(BaseModel):
    """A cart item with its server-resolved price."""

    item: CartItem
    neighborhood_name: str
    city: str = ""
    tier: int | None = None
    unit_price_cents: int


class ValidationResult(BaseModel):
    """Outcome of validate_cart. Only produced for carts that passed."""

    lines: list[PricedLine]
    contact_email: str
    total_cents: int
    currency: str
    warnings: list[str] = Field(default_factory=list)


class CheckoutResult(BaseModel):
    order_id: str
    total_cents: int
    currency: str
    checkout_url: str
    session_id: str


class OrderConfirmation(BaseModel):
    """Result of confirming (or re-reading) an order.

    A repeat confirmation reads the state the first one committed. If that
    one is still activating, its unfinished lines are in ``pending_line_ids``.
    """

    order_id: str
    status: OrderStatus
    total_cents: int
    activated_ad_ids: list[str] = Field(default_factory=list)
    failed_line_ids: list[str] = Field(default_factory=list)
    pending_line_ids: list[str] = Field(default_factory=list)
    already_confirmed: bool = False

    @property
    def degraded(self) -> bool:
        return bool(self.failed_line_ids)

    def public_view(self) -> dict[str, Any]:
        """Buyer-facing summary; activation details stay internal."""
        message = "Your booking is confirmed."
        if self.status == OrderStatus.pending:
            message = "Waiting for payment."
        elif self.status == OrderStatus.abandoned:
            message = "This checkout has expired."
        elif self.degraded or self.pending_line_ids:
            message = "We're processing your order."
        return {"order_id": self.order_id, "status": self.status.value, "message": message}


class SweepReport(BaseModel):
    abandoned_order_ids: list[str] = Field(default_factory=list)
    released_slots: int = 0


class FallbackAd(BaseModel):
    """House unit shown when no paid ad is eligible."""

    source: Literal["neighborhood", "city", "global", "default"]
    promotion_id: str | None = None
    headline: str
    body: str = ""
    click_url: str
    image_url: str = ""
    sponsor_label: str = "House"


class FeedItem(BaseModel):
    """A per-render projection: content, paid ad, or fallback ad."""

    kind: Literal["content", "ad", "fallback"]
    position: int
    slot: str | None = Field(default=None, description="Ad slot name (in_feed, top, bottom, ...)")
    content: ContentItem | None = None
    ad: Ad | None = None
    fallback: FallbackAd | None = None
