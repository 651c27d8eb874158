"""Request DTOs for the booking, availability and feed surfaces."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..domain.inventory import GLOBAL_TAKEOVER_ID, PlacementType, SlotKey


class CartItem(BaseModel):
    """One (neighborhood, date, placement) the buyer wants.

    An item without a neighborhood is a global takeover: one ad shown on
    every neighborhood's feed for that date.
    """

    neighborhood_id: str | None = Field(
        default=None,
        min_length=1,
        description="Neighborhood identifier; omit for a global takeover",
    )
    date: dt.date = Field(..., description="Edition date")
    placement_type: PlacementType = Field(..., description="'daily' or 'weekly'")
    quoted_price_cents: int | None = Field(
        default=None,
        ge=0,
        description="Price the client displayed; checked against the server price",
    )

    @property
    def is_takeover(self) -> bool:
        return self.neighborhood_id is None

    @property
    def label(self) -> str:
        return self.neighborhood_id or "global takeover"

    @property
    def key(self) -> SlotKey:
        return SlotKey(
            neighborhood_id=self.neighborhood_id or GLOBAL_TAKEOVER_ID,
            date=self.date,
            placement_type=self.placement_type,
        )


class CheckoutRequest(BaseModel):
    """Input for checkout_create."""

    items: list[CartItem] = Field(..., description="Cart items")
    contact_email: str = Field(..., description="Buyer email")


class AvailabilityRequest(BaseModel):
    """Input for availability_get. No neighborhood means the takeover calendar."""

    neighborhood_id: str | None = Field(default=None, min_length=1)
    placement_type: PlacementType = Field(default=PlacementType.daily)
    month: str = Field(..., description="YYYY-MM")


class FeedPlacement(str, Enum):
    """Where ads go relative to the content list."""

    in_feed = "in_feed"             # every K content items
    story_open = "story_open"       # top and bottom of a single article
    at_position = "at_position"     # between item n and n+1


class ContentItem(BaseModel):
    """Opaque content entry from the rendering layer."""

    id: str = Field(..., description="Content identifier")
    kind: str = Field(default="article", description="Content type (article, brief, guide, ...)")
    data: dict[str, Any] = Field(default_factory=dict, description="Pass-through payload")


class FallbackContext(BaseModel):
    """Render-time context for the fallback cascade."""

    authenticated: bool = Field(default=False, description="Viewer is signed in")
    placement_type: PlacementType | None = Field(default=None)


class FeedRequest(BaseModel):
    """Input for feed_inject."""

    content: list[ContentItem] = Field(default_factory=list)
    neighborhood_id: str = Field(..., min_length=1)
    placement: FeedPlacement = Field(default=FeedPlacement.in_feed)
    position: int | None = Field(default=None, ge=0, description="For at_position: insert after this many items")
    on_date: dt.date | None = Field(default=None, description="Render date (defaults to today)")
    context: FallbackContext = Field(default_factory=FallbackContext)
