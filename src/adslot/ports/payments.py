"""Port: external payment processor."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field


class CheckoutSession(BaseModel):
    """Hosted payment session opened for one order."""

    session_id: str = Field(..., description="Processor session identifier")
    url: str = Field(..., description="Where to redirect the buyer")


class SessionStatus(BaseModel):
    """Processor view of a session, used for status polls."""

    session_id: str
    paid: bool
    amount_total: int | None = None
    currency: str | None = None
    order_id: str | None = Field(default=None, description="Order id echoed from session metadata")


@runtime_checkable
class PaymentProcessor(Protocol):
    """Create checkout sessions and read back their status."""

    provider_name: str

    def create_checkout_session(
        self,
        *,
        order_id: str,
        amount_cents: int,
        currency: str,
        customer_email: str,
        description: str,
    ) -> CheckoutSession: ...

    def retrieve_session(self, session_id: str) -> SessionStatus: ...
