"""Adapter: Stripe Checkout over the REST API (form-encoded, via httpx).

Webhook signatures use Stripe's scheme: ``Stripe-Signature: t=<ts>,v1=<hex>``
where ``hex = HMAC-SHA256(secret, f"{t}.{raw_body}")``.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import Any

import httpx

from ..domain.errors import PaymentSetupError
from ..ports.payments import CheckoutSession, SessionStatus

logger = logging.getLogger(__name__)

SIGNATURE_TOLERANCE_SECONDS = 300


class WebhookSignatureError(ValueError):
    """Stripe-Signature header missing, malformed, stale or not matching."""


class StripePaymentProcessor:
    provider_name = "stripe"

    def __init__(
        self,
        secret_key: str,
        *,
        success_url: str,
        cancel_url: str,
        api_base: str = "https://api.stripe.com/v1",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("Stripe secret key is required")
        self._success_url = success_url
        self._cancel_url = cancel_url
        self._client = client or httpx.Client(
            base_url=api_base.rstrip("/"),
            timeout=timeout,
        )
        self._auth = (secret_key, "")

    def create_checkout_session(
        self,
        *,
        order_id: str,
        amount_cents: int,
        currency: str,
        customer_email: str,
        description: str,
    ) -> CheckoutSession:
        form = {
            "mode": "payment",
            "customer_email": customer_email,
            "success_url": self._success_url,
            "cancel_url": self._cancel_url,
            "client_reference_id": order_id,
            "line_items[0][quantity]": "1",
            "line_items[0][price_data][currency]": currency,
            "line_items[0][price_data][unit_amount]": str(amount_cents),
            "line_items[0][price_data][product_data][name]": description,
            "metadata[order_id]": order_id,
        }
        try:
            response = self._client.post(
                "/checkout/sessions",
                data=form,
                auth=self._auth,
                headers={"Idempotency-Key": f"checkout-{order_id}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "stripe_session_create_failed",
                extra={"order_id": order_id, "status_code": e.response.status_code},
            )
            raise PaymentSetupError(f"Stripe returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("stripe_session_create_failed", extra={"order_id": order_id, "error": str(e)})
            raise PaymentSetupError(f"Stripe request failed: {e}") from e

        body = response.json()
        if not body.get("id") or not body.get("url"):
            raise PaymentSetupError("Stripe response missing session id or url")
        return CheckoutSession(session_id=body["id"], url=body["url"])

    def retrieve_session(self, session_id: str) -> SessionStatus:
        response = self._client.get(f"/checkout/sessions/{session_id}", auth=self._auth)
        response.raise_for_status()
        return session_status_from_payload(response.json())

    def close(self) -> None:
        self._client.close()


def session_status_from_payload(session: dict[str, Any]) -> SessionStatus:
    """Map a Stripe Checkout Session object onto SessionStatus."""
    metadata = session.get("metadata") or {}
    return SessionStatus(
        session_id=session["id"],
        paid=session.get("payment_status") == "paid",
        amount_total=session.get("amount_total"),
        currency=session.get("currency"),
        order_id=metadata.get("order_id") or session.get("client_reference_id"),
    )


def _parse_signature_header(header: str) -> tuple[int, list[str]]:
    timestamp: int | None = None
    signatures: list[str] = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise WebhookSignatureError("invalid timestamp in signature header") from None
        elif key == "v1":
            signatures.append(value)
    if timestamp is None or not signatures:
        raise WebhookSignatureError("signature header missing t or v1")
    return timestamp, signatures


def verify_webhook_signature(
    payload: bytes,
    header: str | None,
    secret: str,
    *,
    tolerance: int = SIGNATURE_TOLERANCE_SECONDS,
    now: float | None = None,
) -> dict[str, Any]:
    """Verify a webhook delivery and return the decoded event."""
    if not secret:
        raise WebhookSignatureError("webhook secret not configured")
    if not header:
        raise WebhookSignatureError("missing Stripe-Signature header")
    timestamp, signatures = _parse_signature_header(header)

    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance:
        raise WebhookSignatureError("signature timestamp outside tolerance")

    signed = f"{timestamp}.".encode() + payload
    expected = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    if not any(hmac.compare_digest(expected, sig) for sig in signatures):
        raise WebhookSignatureError("signature mismatch")

    try:
        event = json.loads(payload)
    except json.JSONDecodeError as e:
        raise WebhookSignatureError(f"invalid JSON payload: {e}") from e
    if not isinstance(event, dict):
        raise WebhookSignatureError("event payload must be an object")
    return event


def sign_payload(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header value (used by tests and local tooling)."""
    ts = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode(), f"{ts}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"
