"""Payment-processor webhook app (FastAPI).

Entrypoint: adslot-webhook  (or: uvicorn adslot.interface.webhook:create_app --factory)

``POST /webhooks/payments`` confirms paid checkout sessions;
``GET /health`` reports liveness.
"""

from __future__ import annotations

import json
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from ..adapters.stripe_payments import WebhookSignatureError, verify_webhook_signature
from ..config.runtime import RuntimeSettings, get_settings
from ..domain.errors import PaymentConfirmationError
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

CONFIRMING_EVENTS = frozenset({
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
})


def create_app(
    booking_service: BookingService | None = None,
    settings: RuntimeSettings | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    if booking_service is None:
        from ..wiring import build_booking_service
        booking_service = build_booking_service(settings)

    secret = settings.stripe_webhook_secret
    require_signature = settings.payment_provider == "stripe" or bool(secret)

    app = FastAPI(title="adslot webhooks")
    app.state.booking_service = booking_service

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "provider": settings.payment_provider}

    @app.post("/webhooks/payments")
    async def payments_webhook(request: Request) -> dict:
        payload = await request.body()
        if require_signature:
            try:
                event = verify_webhook_signature(payload, request.headers.get("Stripe-Signature"), secret)
            except WebhookSignatureError as e:
                logger.warning("webhook_signature_rejected", extra={"error": str(e)})
                raise HTTPException(status_code=400, detail="invalid signature") from e
        else:
            try:
                event = json.loads(payload)
            except json.JSONDecodeError as e:
                raise HTTPException(status_code=400, detail="invalid JSON payload") from e
            if not isinstance(event, dict):
                raise HTTPException(status_code=400, detail="event payload must be an object")

        event_type = event.get("type")
        session = (event.get("data") or {}).get("object") or {}
        if event_type not in CONFIRMING_EVENTS:
            return {"received": True, "ignored": True}
        if not session.get("id"):
            raise HTTPException(status_code=400, detail="event has no session id")
        if session.get("payment_status") not in (None, "paid"):
            # Delayed payment methods complete later with async_payment_succeeded.
            return {"received": True, "ignored": True}

        try:
            # SQLite calls block on the write lock; keep them off the event loop.
            confirmation = await run_in_threadpool(
                booking_service.confirm_payment,
                session["id"],
                amount_total=session.get("amount_total"),
                currency=session.get("currency"),
            )
        except PaymentConfirmationError as e:
            logger.error(
                "webhook_confirmation_queued",
                extra={"event_id": event.get("id"), "session_id": e.session_id, "order_id": e.order_id, "error": str(e)},
            )
            return {"received": True, "queued": True}

        logger.info(
            "webhook_confirmed",
            extra={
                "event_id": event.get("id"),
                "order_id": confirmation.order_id,
                "already_confirmed": confirmation.already_confirmed,
                "degraded": confirmation.degraded,
            },
        )
        return {"received": True, "order_id": confirmation.order_id}

    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
