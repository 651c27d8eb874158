"""Tests for the Stripe adapter using httpx.MockTransport (no network)."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from adslot.adapters.stripe_payments import (
    StripePaymentProcessor,
    WebhookSignatureError,
    session_status_from_payload,
    sign_payload,
    verify_webhook_signature,
)
from adslot.domain.errors import PaymentSetupError

SECRET = "whsec_test"
NOW = 1_772_445_600


def _processor(handler) -> StripePaymentProcessor:
    client = httpx.Client(base_url="https://stripe.test/v1", transport=httpx.MockTransport(handler))
    return StripePaymentProcessor(
        "sk_test_123",
        success_url="https://example.com/ok",
        cancel_url="https://example.com/cancel",
        client=client,
    )


def _create(processor):
    return processor.create_checkout_session(
        order_id="ord_1",
        amount_cents=25_000,
        currency="usd",
        customer_email="buyer@example.com",
        description="Tribeca daily 2026-03-10",
    )


def test_create_session_posts_form():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["headers"] = request.headers
        seen["form"] = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        return httpx.Response(200, json={"id": "cs_test_1", "url": "https://checkout.stripe.test/cs_test_1"})

    session = _create(_processor(handler))

    assert (session.session_id, session.url) == ("cs_test_1", "https://checkout.stripe.test/cs_test_1")
    assert seen["path"] == "/v1/checkout/sessions"
    assert seen["headers"]["Idempotency-Key"] == "checkout-ord_1"
    assert seen["headers"]["Authorization"].startswith("Basic ")
    assert seen["form"]["line_items[0][price_data][unit_amount]"] == "25000"
    assert seen["form"]["metadata[order_id]"] == "ord_1"
    assert seen["form"]["client_reference_id"] == "ord_1"


def test_create_session_error_status():
    processor = _processor(lambda request: httpx.Response(402, json={"error": {"message": "card declined"}}))
    with pytest.raises(PaymentSetupError):
        _create(processor)


def test_create_session_transport_error():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(PaymentSetupError):
        _create(_processor(handler))


def test_retrieve_session_maps_payload():
    payload = {
        "id": "cs_test_1",
        "payment_status": "paid",
        "amount_total": 25_000,
        "currency": "usd",
        "client_reference_id": "ord_1",
    }
    status = _processor(lambda request: httpx.Response(200, json=payload)).retrieve_session("cs_test_1")
    assert status.paid
    assert status.order_id == "ord_1"


def test_metadata_order_id_wins():
    status = session_status_from_payload(
        {"id": "cs", "payment_status": "unpaid", "metadata": {"order_id": "ord_m"}, "client_reference_id": "ord_c"}
    )
    assert status.order_id == "ord_m"
    assert not status.paid


def test_missing_secret_key():
    with pytest.raises(ValueError):
        StripePaymentProcessor("", success_url="x", cancel_url="y")


class TestWebhookSignature:
    body = json.dumps({"id": "evt_1", "type": "checkout.session.completed"}).encode()

    def test_valid(self):
        header = sign_payload(self.body, SECRET, NOW)
        assert verify_webhook_signature(self.body, header, SECRET, now=NOW)["id"] == "evt_1"

    def test_tampered_body(self):
        header = sign_payload(self.body, SECRET, NOW)
        with pytest.raises(WebhookSignatureError):
            verify_webhook_signature(self.body + b" ", header, SECRET, now=NOW)

    def test_stale_timestamp(self):
        header = sign_payload(self.body, SECRET, NOW - 301)
        with pytest.raises(WebhookSignatureError, match="tolerance"):
            verify_webhook_signature(self.body, header, SECRET, now=NOW)

    @pytest.mark.parametrize("header", [None, "", "t=abc,v1=00", "v1=00", f"t={NOW}"])
    def test_malformed_header(self, header):
        with pytest.raises(WebhookSignatureError):
            verify_webhook_signature(self.body, header, SECRET, now=NOW)

    def test_unconfigured_secret(self):
        with pytest.raises(WebhookSignatureError):
            verify_webhook_signature(self.body, sign_payload(self.body, SECRET, NOW), "", now=NOW)


def test_adapters_satisfy_payment_port():
    from adslot.adapters.mock_payments import MockPaymentProcessor
    from adslot.ports.payments import PaymentProcessor

    assert isinstance(MockPaymentProcessor(), PaymentProcessor)
    assert isinstance(_processor(lambda request: httpx.Response(200)), PaymentProcessor)
