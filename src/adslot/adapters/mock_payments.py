"""Adapter: in-memory payment processor for local development and tests."""

from __future__ import annotations

import threading
import uuid

from ..domain.errors import PaymentSetupError
from ..ports.payments import CheckoutSession, SessionStatus


class MockPaymentProcessor:
    """Creates fake hosted sessions; call ``mark_paid`` to simulate the buyer paying."""

    provider_name = "mock"

    def __init__(self, base_url: str = "https://checkout.invalid/pay", fail_create: bool = False) -> None:
        self._base_url = base_url.rstrip("/")
        self.fail_create = fail_create
        self._lock = threading.Lock()
        self._sessions: dict[str, dict] = {}

    def create_checkout_session(
        self,
        *,
        order_id: str,
        amount_cents: int,
        currency: str,
        customer_email: str,
        description: str,
    ) -> CheckoutSession:
        if self.fail_create:
            raise PaymentSetupError("mock processor configured to fail session creation")
        session_id = f"cs_mock_{uuid.uuid4().hex}"
        with self._lock:
            self._sessions[session_id] = {
                "order_id": order_id,
                "amount_total": amount_cents,
                "currency": currency,
                "customer_email": customer_email,
                "description": description,
                "paid": False,
            }
        return CheckoutSession(session_id=session_id, url=f"{self._base_url}/{session_id}")

    def retrieve_session(self, session_id: str) -> SessionStatus:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            return SessionStatus(session_id=session_id, paid=False)
        return SessionStatus(
            session_id=session_id,
            paid=session["paid"],
            amount_total=session["amount_total"],
            currency=session["currency"],
            order_id=session["order_id"],
        )

    def mark_paid(self, session_id: str) -> SessionStatus:
        with self._lock:
            if session_id not in self._sessions:
                raise KeyError(session_id)
            self._sessions[session_id]["paid"] = True
        return self.retrieve_session(session_id)

    def sessions(self) -> dict[str, dict]:
        with self._lock:
            return {k: dict(v) for k, v in self._sessions.items()}
