"""Domain layer for adslot."""

from .errors import (
    AdSlotError,
    BookingWindowError,
    CartValidationError,
    ConflictError,
    InvalidTransitionError,
    NeighborhoodNotFoundError,
    NotFoundError,
    PartialActivationFailure,
    PaymentConfirmationError,
    PaymentSetupError,
    PricingMismatchError,
    StaleOrderSweepFailure,
)
from .fallback import DEFAULT_FALLBACK, FallbackAdSelector
from .feed_engine import FeedInjectionEngine, rank_ads
from .filters import AdFilter, FieldFilter, FilterOp, SlotFilter
from .pricing import PriceTable, PricingResolver, TierRates
from .schedule import BookingWindow, Month, campaign_window, placement_allowed_on

__all__ = [
    "AdFilter",
    "AdSlotError",
    "BookingWindow",
    "BookingWindowError",
    "CartValidationError",
    "ConflictError",
    "DEFAULT_FALLBACK",
    "FallbackAdSelector",
    "FeedInjectionEngine",
    "FieldFilter",
    "FilterOp",
    "InvalidTransitionError",
    "Month",
    "NeighborhoodNotFoundError",
    "NotFoundError",
    "PartialActivationFailure",
    "PaymentConfirmationError",
    "PaymentSetupError",
    "PriceTable",
    "PricingMismatchError",
    "PricingResolver",
    "SlotFilter",
    "StaleOrderSweepFailure",
    "TierRates",
    "campaign_window",
    "placement_allowed_on",
    "rank_ads",
]
