"""Domain errors for inventory, booking and activation."""

from __future__ import annotations

from typing import Any

GENERIC_PAYMENT_MESSAGE = "We're processing your order."


class AdSlotError(Exception):
    """Base class for all adslot domain errors."""

    code = "error"

    @property
    def public_message(self) -> str:
        """Message that is safe to show to the buyer."""
        return str(self)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.public_message}


class NotFoundError(AdSlotError, LookupError):
    code = "not_found"


class NeighborhoodNotFoundError(NotFoundError):
    code = "neighborhood_not_found"

    def __init__(self, neighborhood_id: str) -> None:
        super().__init__(f"Unknown neighborhood: {neighborhood_id}")
        self.neighborhood_id = neighborhood_id


class CartValidationError(AdSlotError, ValueError):
    code = "invalid_cart"


class BookingWindowError(CartValidationError):
    code = "outside_booking_window"


class ConflictError(AdSlotError):
    """A cart item can no longer be sold. Stale data, never retried."""

    code = "conflict"

    def __init__(self, message: str, *, item: Any = None, reason: str = "unavailable") -> None:
        super().__init__(message)
        self.item = item
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["reason"] = self.reason
        if self.item is not None:
            out["item"] = self.item.model_dump(mode="json") if hasattr(self.item, "model_dump") else self.item
        return out


class PricingMismatchError(AdSlotError):
    code = "pricing_mismatch"

    def __init__(self, message: str, *, item: Any = None, expected_cents: int, quoted_cents: int) -> None:
        super().__init__(message)
        self.item = item
        self.expected_cents = expected_cents
        self.quoted_cents = quoted_cents


class InvalidTransitionError(AdSlotError):
    code = "invalid_transition"


class PaymentSetupError(AdSlotError):
    code = "payment_setup_failed"

    @property
    def public_message(self) -> str:
        return "Payment setup failed. Please try again."


class PaymentConfirmationError(AdSlotError):
    """Processor reported something we cannot reconcile automatically."""

    code = "payment_confirmation_failed"

    def __init__(self, message: str, *, session_id: str | None = None, order_id: str | None = None) -> None:
        super().__init__(message)
        self.session_id = session_id
        self.order_id = order_id

    @property
    def public_message(self) -> str:
        return GENERIC_PAYMENT_MESSAGE


class PartialActivationFailure(AdSlotError):
    """Order is paid but an ad for one of its lines could not be activated."""

    code = "activation_failed"

    def __init__(self, message: str, *, order_id: str, line_id: str) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.line_id = line_id

    @property
    def public_message(self) -> str:
        return GENERIC_PAYMENT_MESSAGE


class StaleOrderSweepFailure(AdSlotError):
    code = "sweep_failed"
