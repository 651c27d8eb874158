"""Tool registry for MCP servers.

Strict request models via Pydantic; domain errors mapped to JSON error
objects; response allowlists (field-level) so internal state never leaks.
"""

from __future__ import annotations

import json
import time
import uuid
from datetime import date, timedelta
from typing import Any, Callable

from pydantic import ValidationError

from ...domain.errors import AdSlotError
from ...models.requests import (
    AvailabilityRequest,
    CartItem,
    CheckoutRequest,
    ContentItem,
    FallbackContext,
    FeedPlacement,
    FeedRequest,
)
from ...domain.inventory import Creative, HousePromotion
from .observability import log_tool_invocation, metrics_snapshot

# ---------------------------------------------------------------------------
# Response allowlists (field-level)
# ---------------------------------------------------------------------------
ALLOWED_AVAILABILITY_KEYS = frozenset({
    "neighborhood_id",
    "placement_type",
    "month",
    "tier",
    "price",
    "booked_dates",
    "blocked_dates",
    "min_date",
    "max_date",
    "weekly_weekday",
})
ALLOWED_FEED_ITEM_KEYS = frozenset({"kind", "position", "slot", "content", "ad", "fallback"})
ALLOWED_FEED_AD_KEYS = frozenset({"id", "scope", "neighborhood_id", "placement_type", "creative"})
ALLOWED_QUOTE_LINE_KEYS = frozenset({"item", "neighborhood_name", "city", "tier", "unit_price_cents"})
ALLOWED_CHECKOUT_KEYS = frozenset({"order_id", "total_cents", "currency", "checkout_url"})
ALLOWED_AD_KEYS = frozenset({
    "id",
    "order_line_id",
    "status",
    "scope",
    "neighborhood_id",
    "placement_type",
    "start_date",
    "end_date",
    "paid",
    "creative",
    "status_reason",
})


def _pick(d: dict, allowed: frozenset[str]) -> dict:
    return {k: d[k] for k in allowed if k in d}


def _shape_feed_item(item: Any) -> dict:
    d = _pick(item.model_dump(mode="json", exclude_none=True), ALLOWED_FEED_ITEM_KEYS)
    if "ad" in d:
        d["ad"] = _pick(d["ad"], ALLOWED_FEED_AD_KEYS)
    return d


def _shape_ad(ad: Any) -> dict:
    return _pick(ad.model_dump(mode="json"), ALLOWED_AD_KEYS)


def _invoke(tool: str, call: Callable[[], Any]) -> str:
    """Run ``call``, log it, and serialize either the result or a domain error."""
    trace_id = uuid.uuid4().hex
    t0 = time.monotonic()
    try:
        result = call()
    except AdSlotError as e:
        log_tool_invocation(tool, trace_id, (time.monotonic() - t0) * 1000, error=e.code)
        return json.dumps(e.to_dict())
    except ValidationError as e:
        log_tool_invocation(tool, trace_id, (time.monotonic() - t0) * 1000, error="invalid_request")
        return json.dumps({"error": "invalid_request", "detail": e.errors(include_url=False)}, default=str)
    except ValueError as e:
        # Malformed dates, enums and JSON arguments.
        log_tool_invocation(tool, trace_id, (time.monotonic() - t0) * 1000, error="invalid_request")
        return json.dumps({"error": "invalid_request", "detail": str(e)})
    log_tool_invocation(tool, trace_id, (time.monotonic() - t0) * 1000)
    return json.dumps(result, indent=2, default=str)


def _get_availability_service():
    from ...wiring import build_availability_service
    return build_availability_service()


def _get_booking_service():
    from ...wiring import build_booking_service
    return build_booking_service()


def _get_feed_service():
    from ...wiring import build_feed_service
    return build_feed_service()


def _get_review_service():
    from ...wiring import build_review_service
    return build_review_service()


def _get_admin_service():
    from ...wiring import build_admin_service
    return build_admin_service()


# ---------------------------------------------------------------------------
# Engine tools
# ---------------------------------------------------------------------------
ENGINE_ALLOWED_TOOLS = frozenset({
    "availability_get",
    "feed_inject",
    "fallback_select",
    "cart_quote",
    "checkout_create",
    "checkout_status",
})


def register_engine_tools(mcp):
    """Register Engine (rendering layer / buyer-facing) tools."""

    @mcp.tool()
    def availability_get(month: str, neighborhood_id: str | None = None, placement_type: str = "daily") -> str:
        """Calendar for one neighborhood and month: booked/blocked dates, tier prices, booking window.

        Args:
            neighborhood_id: Neighborhood identifier; omit for the global takeover calendar
            month: Month as YYYY-MM
            placement_type: 'daily' or 'weekly'
        """

        def run() -> dict:
            req = AvailabilityRequest(neighborhood_id=neighborhood_id, placement_type=placement_type, month=month)
            view = _get_availability_service().get_availability(req.neighborhood_id, req.placement_type, req.month)
            out = _pick(view.model_dump(mode="json"), ALLOWED_AVAILABILITY_KEYS)
            out["bookable_dates"] = [d.isoformat() for d in view.bookable_dates()]
            return out

        return _invoke("availability_get", run)

    @mcp.tool()
    def feed_inject(
        neighborhood_id: str,
        content: list[dict],
        placement: str = "in_feed",
        position: int | None = None,
        on_date: str | None = None,
        authenticated: bool = False,
    ) -> str:
        """Interleave paid (or house) ads with an ordered content list.

        Args:
            neighborhood_id: Neighborhood the feed renders for
            content: Ordered content items ({"id", "kind", "data"})
            placement: 'in_feed', 'story_open' or 'at_position'
            position: For at_position, number of content items before the ad
            on_date: Render date YYYY-MM-DD (default today)
            authenticated: Viewer is signed in (hides sign-up house units)
        """

        def run() -> dict:
            request = FeedRequest(
                content=[ContentItem.model_validate(c) for c in content],
                neighborhood_id=neighborhood_id,
                placement=FeedPlacement(placement),
                position=position,
                on_date=date.fromisoformat(on_date) if on_date else None,
                context=FallbackContext(authenticated=authenticated),
            )
            items = _get_feed_service().inject_ads(request)
            return {"items": [_shape_feed_item(i) for i in items]}

        return _invoke("feed_inject", run)

    @mcp.tool()
    def fallback_select(neighborhood_id: str | None = None, authenticated: bool = False) -> str:
        """House unit for an unsold slot: neighborhood, city, global, then the built-in default."""

        def run() -> dict:
            fallback = _get_feed_service().select_fallback(
                neighborhood_id, FallbackContext(authenticated=authenticated)
            )
            return fallback.model_dump(mode="json")

        return _invoke("fallback_select", run)

    @mcp.tool()
    def cart_quote(items: list[dict], contact_email: str) -> str:
        """Validate a cart against current inventory and return server-resolved prices (no booking).

        Args:
            items: Cart items ({"neighborhood_id"?, "date", "placement_type", "quoted_price_cents"?});
                an item without neighborhood_id is a global takeover
            contact_email: Buyer email
        """

        def run() -> dict:
            request = CheckoutRequest(items=[CartItem.model_validate(i) for i in items], contact_email=contact_email)
            result = _get_booking_service().validate_cart(request.items, request.contact_email)
            dumped = result.model_dump(mode="json")
            return {
                "lines": [_pick(line, ALLOWED_QUOTE_LINE_KEYS) for line in dumped["lines"]],
                "total_cents": result.total_cents,
                "currency": result.currency,
                "warnings": result.warnings,
            }

        return _invoke("cart_quote", run)

    @mcp.tool()
    def checkout_create(items: list[dict], contact_email: str) -> str:
        """Reserve the cart atomically and open a payment session. Returns the checkout URL."""

        def run() -> dict:
            request = CheckoutRequest(items=[CartItem.model_validate(i) for i in items], contact_email=contact_email)
            result = _get_booking_service().checkout(request.items, request.contact_email)
            return _pick(result.model_dump(mode="json"), ALLOWED_CHECKOUT_KEYS) | {"session_id": result.session_id}

        return _invoke("checkout_create", run)

    @mcp.tool()
    def checkout_status(session_id: str) -> str:
        """Poll a checkout session; confirms the order if the processor reports it paid."""

        def run() -> dict:
            return _get_booking_service().poll_session(session_id).public_view()

        return _invoke("checkout_status", run)


# ---------------------------------------------------------------------------
# Studio tools
# ---------------------------------------------------------------------------
STUDIO_ALLOWED_TOOLS = frozenset({
    "slots_block",
    "slots_unblock",
    "ads_review_queue",
    "ads_get",
    "ads_submit_creative",
    "ads_approve",
    "ads_reject",
    "ads_pause",
    "ads_resume",
    "orders_get",
    "orders_confirm_manual",
    "orders_sweep",
    "tasks_list",
    "tasks_resolve",
    "promotions_upsert",
    "promotions_list",
    "studio_health",
})


def register_studio_tools(mcp):
    """Register Studio (operator / admin) tools."""

    @mcp.tool()
    def slots_block(neighborhood_id: str, date: str, placement_type: str = "daily", note: str | None = None) -> str:
        """Hold a slot out of sale (fails if already booked)."""
        from datetime import date as _date

        def run() -> dict:
            slot = _get_admin_service().block_slot(neighborhood_id, _date.fromisoformat(date), placement_type, note)
            return slot.model_dump(mode="json")

        return _invoke("slots_block", run)

    @mcp.tool()
    def slots_unblock(neighborhood_id: str, date: str, placement_type: str = "daily") -> str:
        """Release an administrative hold. No-op if the slot is not blocked."""
        from datetime import date as _date

        def run() -> dict:
            released = _get_admin_service().unblock_slot(neighborhood_id, _date.fromisoformat(date), placement_type)
            return {"unblocked": released}

        return _invoke("slots_unblock", run)

    @mcp.tool()
    def ads_review_queue() -> str:
        """Ads waiting for review."""
        return _invoke("ads_review_queue", lambda: {"ads": [_shape_ad(a) for a in _get_review_service().review_queue()]})

    @mcp.tool()
    def ads_get(ad_id: str) -> str:
        """Get one ad by id."""
        return _invoke("ads_get", lambda: _shape_ad(_get_review_service().get_ad(ad_id)))

    @mcp.tool()
    def ads_submit_creative(
        ad_id: str,
        headline: str,
        click_url: str,
        body: str = "",
        image_url: str = "",
        sponsor_label: str = "",
    ) -> str:
        """Replace the creative of an ad that is still in review."""

        def run() -> dict:
            creative = Creative(
                headline=headline,
                body=body,
                image_url=image_url,
                click_url=click_url,
                sponsor_label=sponsor_label,
            )
            return _shape_ad(_get_review_service().submit_creative(ad_id, creative))

        return _invoke("ads_submit_creative", run)

    @mcp.tool()
    def ads_approve(ad_id: str) -> str:
        """Approve an ad. A paid ad goes live immediately."""
        return _invoke("ads_approve", lambda: _shape_ad(_get_review_service().approve(ad_id)))

    @mcp.tool()
    def ads_reject(ad_id: str, reason: str) -> str:
        """Reject an ad in review (reason required)."""
        return _invoke("ads_reject", lambda: _shape_ad(_get_review_service().reject(ad_id, reason)))

    @mcp.tool()
    def ads_pause(ad_id: str) -> str:
        """Pause a live ad. The campaign end date does not move."""
        return _invoke("ads_pause", lambda: _shape_ad(_get_review_service().pause(ad_id)))

    @mcp.tool()
    def ads_resume(ad_id: str) -> str:
        """Resume a paused ad."""
        return _invoke("ads_resume", lambda: _shape_ad(_get_review_service().resume(ad_id)))

    @mcp.tool()
    def orders_get(order_id: str) -> str:
        """Full order record with lines (operator view)."""
        return _invoke("orders_get", lambda: _get_admin_service().get_order(order_id).model_dump(mode="json"))

    @mcp.tool()
    def orders_confirm_manual(order_id: str, operator: str) -> str:
        """Mark an order paid out-of-band and activate its ads."""

        def run() -> dict:
            confirmation = _get_booking_service().confirm_order_manually(order_id, operator)
            return confirmation.model_dump(mode="json") | {"degraded": confirmation.degraded}

        return _invoke("orders_confirm_manual", run)

    @mcp.tool()
    def orders_sweep(older_than_minutes: int | None = None) -> str:
        """Abandon unpaid orders older than the threshold and release their slots."""

        def run() -> dict:
            older_than = timedelta(minutes=older_than_minutes) if older_than_minutes else None
            return _get_booking_service().expire_stale_orders(older_than).model_dump(mode="json")

        return _invoke("orders_sweep", run)

    @mcp.tool()
    def tasks_list(open_only: bool = True) -> str:
        """Operator reconciliation queue."""
        return _invoke(
            "tasks_list",
            lambda: {"tasks": [t.model_dump(mode="json") for t in _get_admin_service().list_tasks(open_only)]},
        )

    @mcp.tool()
    def tasks_resolve(task_id: int) -> str:
        """Mark a queue entry handled."""
        return _invoke("tasks_resolve", lambda: {"resolved": _get_admin_service().resolve_task(task_id)})

    @mcp.tool()
    def promotions_upsert(promotion_json: str) -> str:
        """Create or replace a house promotion. Input: JSON object."""

        def run() -> dict:
            promotion = HousePromotion.model_validate(json.loads(promotion_json))
            return _get_admin_service().upsert_house_promotion(promotion).model_dump(mode="json")

        return _invoke("promotions_upsert", run)

    @mcp.tool()
    def promotions_list(active_only: bool = False) -> str:
        """House promotions used by the fallback cascade."""
        return _invoke(
            "promotions_list",
            lambda: {
                "promotions": [
                    p.model_dump(mode="json") for p in _get_admin_service().list_house_promotions(active_only)
                ]
            },
        )

    @mcp.tool()
    def studio_health() -> str:
        """Tool call and error counters for this process."""
        return json.dumps({"ok": True, "metrics": metrics_snapshot()})
