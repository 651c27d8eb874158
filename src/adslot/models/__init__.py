"""Domain and interface request/response models."""

from ..domain.inventory import (
    Ad,
    AdScope,
    AdStatus,
    Creative,
    HousePromotion,
    InventorySlot,
    Neighborhood,
    OperatorTask,
    Order,
    OrderLine,
    OrderStatus,
    PlacementType,
    SlotKey,
    SlotState,
)
from .requests import (
    AvailabilityRequest,
    CartItem,
    CheckoutRequest,
    ContentItem,
    FallbackContext,
    FeedPlacement,
    FeedRequest,
)
from .responses import (
    AvailabilityView,
    CheckoutResult,
    FallbackAd,
    FeedItem,
    OrderConfirmation,
    PricedLine,
    SweepReport,
    ValidationResult,
)

__all__ = [
    # Domain
    "Ad",
    "AdScope",
    "AdStatus",
    "Creative",
    "HousePromotion",
    "InventorySlot",
    "Neighborhood",
    "OperatorTask",
    "Order",
    "OrderLine",
    "OrderStatus",
    "PlacementType",
    "SlotKey",
    "SlotState",
    # Requests
    "AvailabilityRequest",
    "CartItem",
    "CheckoutRequest",
    "ContentItem",
    "FallbackContext",
    "FeedPlacement",
    "FeedRequest",
    # Responses
    "AvailabilityView",
    "CheckoutResult",
    "FallbackAd",
    "FeedItem",
    "OrderConfirmation",
    "PricedLine",
    "SweepReport",
    "ValidationResult",
]
