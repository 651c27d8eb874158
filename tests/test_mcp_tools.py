"""Tests for the MCP surfaces: tool sets per mode and JSON error mapping.

The Engine (rendering layer) must never expose operator tools.
"""

import json

import pytest

from adslot.interface.mcp import tools
from adslot.interface.mcp.observability import metrics_snapshot, reset_metrics
from adslot.interface.mcp.server import create_server
from adslot.interface.mcp.tools import ENGINE_ALLOWED_TOOLS, STUDIO_ALLOWED_TOOLS

from conftest import TUESDAY

OPERATOR_ONLY = {"slots_block", "slots_unblock", "ads_approve", "ads_reject", "orders_confirm_manual", "orders_sweep"}


def _get_tool_names(server) -> set[str]:
    return set(server._tool_manager._tools.keys())


def _call(server, name, **kwargs) -> dict:
    return json.loads(server._tool_manager._tools[name].fn(**kwargs))


def _item(neighborhood_id="tribeca", day=TUESDAY):
    return {"neighborhood_id": neighborhood_id, "date": day.isoformat(), "placement_type": "daily"}


@pytest.fixture(autouse=True)
def _fresh_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def engine(monkeypatch, booking, availability, feed_service):
    monkeypatch.setattr(tools, "_get_booking_service", lambda: booking)
    monkeypatch.setattr(tools, "_get_availability_service", lambda: availability)
    monkeypatch.setattr(tools, "_get_feed_service", lambda: feed_service)
    return create_server("engine")


@pytest.fixture
def studio(monkeypatch, booking, review, admin):
    monkeypatch.setattr(tools, "_get_booking_service", lambda: booking)
    monkeypatch.setattr(tools, "_get_review_service", lambda: review)
    monkeypatch.setattr(tools, "_get_admin_service", lambda: admin)
    return create_server("studio")


class TestToolSets:
    def test_engine_exposes_exactly_allowed_tools(self):
        assert _get_tool_names(create_server("engine")) == ENGINE_ALLOWED_TOOLS

    def test_studio_exposes_exactly_allowed_tools(self):
        assert _get_tool_names(create_server("studio")) == STUDIO_ALLOWED_TOOLS

    def test_engine_has_no_operator_tools(self):
        assert not ENGINE_ALLOWED_TOOLS & OPERATOR_ONLY
        assert not ENGINE_ALLOWED_TOOLS & STUDIO_ALLOWED_TOOLS

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            create_server("data")


class TestEngineTools:
    def test_checkout_then_conflict(self, engine):
        created = _call(engine, "checkout_create", items=[_item()], contact_email="buyer@example.com")
        assert created["total_cents"] == 10_000
        assert created["checkout_url"].endswith(created["session_id"])

        again = _call(engine, "checkout_create", items=[_item()], contact_email="other@example.com")
        assert again["error"] == "conflict"
        assert again["reason"] == "booked"
        assert again["item"]["neighborhood_id"] == "tribeca"

        counters = metrics_snapshot()
        assert counters["tool_calls"]["checkout_create"] == 2
        assert counters["errors"]["checkout_create"] == 1

    def test_malformed_item_is_invalid_request(self, engine):
        out = _call(engine, "cart_quote", items=[_item() | {"date": "next tuesday"}], contact_email="a@b.co")
        assert out["error"] == "invalid_request"

    def test_quote_does_not_book(self, engine, store):
        out = _call(engine, "cart_quote", items=[_item("downtown")], contact_email="buyer@example.com")
        assert out["total_cents"] == 15_000
        assert set(out["lines"][0]) <= tools.ALLOWED_QUOTE_LINE_KEYS
        assert _call(engine, "availability_get", neighborhood_id="downtown", month="2026-03")["booked_dates"] == []

    def test_availability_includes_bookable_dates(self, engine):
        out = _call(engine, "availability_get", neighborhood_id="tribeca", month="2026-03", placement_type="weekly")
        assert out["bookable_dates"] == ["2026-03-08", "2026-03-15", "2026-03-22", "2026-03-29"]

    def test_takeover_checkout_and_calendar(self, engine):
        takeover = {"date": TUESDAY.isoformat(), "placement_type": "daily"}
        created = _call(engine, "checkout_create", items=[takeover], contact_email="buyer@example.com")
        assert created["total_cents"] == 1_000_000

        calendar = _call(engine, "availability_get", month="2026-03")
        assert calendar["neighborhood_id"] is None
        assert calendar["booked_dates"] == [TUESDAY.isoformat()]
        blocked = _call(engine, "checkout_create", items=[_item("soho")], contact_email="buyer@example.com")
        assert blocked["error"] == "conflict"

    def test_unknown_neighborhood_availability(self, engine):
        assert _call(engine, "availability_get", neighborhood_id="atlantis", month="2026-03")["error"] == (
            "neighborhood_not_found"
        )

    def test_checkout_status_after_payment(self, engine, payments):
        created = _call(engine, "checkout_create", items=[_item()], contact_email="buyer@example.com")
        assert _call(engine, "checkout_status", session_id=created["session_id"])["status"] == "pending"
        payments.mark_paid(created["session_id"])
        status = _call(engine, "checkout_status", session_id=created["session_id"])
        assert status == {"order_id": created["order_id"], "status": "paid", "message": "Your booking is confirmed."}

    def test_feed_inject_shapes_items(self, engine):
        out = _call(
            engine,
            "feed_inject",
            neighborhood_id="tribeca",
            content=[{"id": "a"}, {"id": "b"}, {"id": "c"}],
            on_date=TUESDAY.isoformat(),
        )
        kinds = [i["kind"] for i in out["items"]]
        assert kinds == ["content", "content", "content", "fallback"]
        assert out["items"][-1]["fallback"]["source"] == "default"


class TestStudioTools:
    def test_block_and_unknown_ad(self, studio):
        slot = _call(studio, "slots_block", neighborhood_id="tribeca", date=TUESDAY.isoformat(), note="shoot")
        assert slot["state"] == "blocked"
        assert _call(studio, "ads_get", ad_id="nope")["error"] == "not_found"

    def test_bad_date_is_invalid_request(self, studio):
        out = _call(studio, "slots_block", neighborhood_id="tribeca", date="2026-13-40")
        assert out["error"] == "invalid_request"

    def test_promotion_upsert_validates(self, studio):
        bad = _call(studio, "promotions_upsert", promotion_json=json.dumps({"id": "p", "headline": "x"}))
        assert bad["error"] == "invalid_request"
        good = _call(
            studio,
            "promotions_upsert",
            promotion_json=json.dumps({"id": "p", "headline": "Advertise", "click_url": "/advertise"}),
        )
        assert good["id"] == "p"
        assert [p["id"] for p in _call(studio, "promotions_list")["promotions"]] == ["p"]

    def test_health_reports_counters(self, studio):
        _call(studio, "ads_get", ad_id="nope")
        health = _call(studio, "studio_health")
        assert health["ok"] is True
        assert health["metrics"]["errors"]["ads_get"] == 1


class TestScopes:
    @pytest.fixture
    def strict(self, settings, monkeypatch):
        from adslot.config import runtime

        strict = settings.model_copy(update={"require_studio_key": True, "require_engine_key": True})
        monkeypatch.setattr(runtime, "get_settings", lambda: strict)
        monkeypatch.delenv("ADSLOT_STUDIO_KEY", raising=False)
        monkeypatch.delenv("ADSLOT_ENGINE_KEY", raising=False)
        return strict

    def test_missing_keys_refuse_start(self, strict):
        from adslot.interface.mcp.auth import check_scope

        with pytest.raises(PermissionError):
            check_scope("studio")
        with pytest.raises(PermissionError):
            check_scope("engine")

    def test_keys_present(self, strict, monkeypatch):
        from adslot.interface.mcp.auth import check_scope

        monkeypatch.setenv("ADSLOT_STUDIO_KEY", "s3cret")
        check_scope("studio")
        with pytest.raises(ValueError):
            check_scope("data")


class TestEngineResources:
    def _resource(self, server, uri):
        return server._resource_manager._resources[uri]

    def test_studio_has_no_resources(self):
        assert not create_server("studio")._resource_manager._resources

    def test_catalog(self, directory, monkeypatch):
        from adslot import wiring
        from adslot.interface.mcp.server import CATALOG_URI

        monkeypatch.setattr(wiring, "build_directory", lambda settings=None: directory)
        catalog = json.loads(self._resource(create_server("engine"), CATALOG_URI).fn())
        downtown = next(n for n in catalog if n["id"] == "downtown")
        assert downtown["component_ids"] == ["tribeca", "soho"]

    def test_rate_card(self, settings, monkeypatch):
        from adslot.config import runtime
        from adslot.interface.mcp.server import RATES_URI

        monkeypatch.setattr(runtime, "get_settings", lambda: settings)
        rates = json.loads(self._resource(create_server("engine"), RATES_URI).fn())
        assert rates["tiers"]["2"] == {"daily": 15_000, "weekly": 22_500}
        assert rates["weekly_weekday"] == 6
        assert rates["takeover"] == {"daily": 1_000_000, "weekly": 1_500_000}
