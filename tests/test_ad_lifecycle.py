"""Tests for ad state transitions and the ReviewService."""

from datetime import date, datetime, timezone

import pytest

from adslot.domain import ad_lifecycle
from adslot.domain.errors import InvalidTransitionError, NotFoundError
from adslot.domain.inventory import Ad, AdStatus, Creative

from conftest import TUESDAY, cart_item

START = date(2026, 3, 15)
END = date(2026, 3, 21)


def _ad(**kwargs) -> Ad:
    defaults = dict(id="ad1", neighborhood_id="tribeca", created_at=datetime(2026, 3, 1, tzinfo=timezone.utc))
    defaults.update(kwargs)
    return Ad(**defaults)


def test_approved_ad_goes_live_on_payment():
    ad = ad_lifecycle.apply_payment(ad_lifecycle.approve(_ad()), START, END)
    assert ad.status == AdStatus.active
    assert ad.paid
    assert (ad.start_date, ad.end_date) == (START, END)


def test_payment_in_review_keeps_status():
    ad = ad_lifecycle.apply_payment(_ad(), START, END)
    assert ad.status == AdStatus.pending_review
    assert ad_lifecycle.approve(ad).status == AdStatus.active


def test_apply_payment_is_idempotent():
    ad = ad_lifecycle.apply_payment(ad_lifecycle.approve(_ad()), START, END)
    assert ad_lifecycle.apply_payment(ad, START, END) is ad


def test_pause_keeps_end_date():
    live = ad_lifecycle.apply_payment(ad_lifecycle.approve(_ad()), START, END)
    paused = ad_lifecycle.pause(live)
    assert paused.status == AdStatus.paused
    assert paused.end_date == END
    resumed = ad_lifecycle.resume(paused)
    assert resumed.status == AdStatus.active
    assert resumed.end_date == END


def test_paused_ad_does_not_run():
    live = ad_lifecycle.apply_payment(ad_lifecycle.approve(_ad()), START, END)
    assert live.runs_on(START)
    assert not ad_lifecycle.pause(live).runs_on(START)


def test_reject_requires_reason():
    with pytest.raises(InvalidTransitionError):
        ad_lifecycle.reject(_ad(), "   ")
    rejected = ad_lifecycle.reject(_ad(), "misleading claim")
    assert rejected.status == AdStatus.rejected
    assert rejected.status_reason == "misleading claim"


@pytest.mark.parametrize(
    "action",
    [
        lambda ad: ad_lifecycle.pause(ad),
        lambda ad: ad_lifecycle.resume(ad),
        lambda ad: ad_lifecycle.approve(ad_lifecycle.approve(ad)),
        lambda ad: ad_lifecycle.apply_payment(ad_lifecycle.reject(ad, "no"), START, END),
    ],
)
def test_illegal_transitions(action):
    with pytest.raises(InvalidTransitionError):
        action(_ad())


def test_creative_only_editable_in_review():
    creative = Creative(headline="Fresh bagels", click_url="https://example.com")
    assert ad_lifecycle.submit_creative(_ad(), creative).creative.headline == "Fresh bagels"
    with pytest.raises(InvalidTransitionError):
        ad_lifecycle.submit_creative(ad_lifecycle.approve(_ad()), creative)


class TestReviewService:
    def _order_ad(self, booking, store):
        result = booking.checkout([cart_item("tribeca")], "buyer@example.com")
        line = store.get_order(result.order_id).lines[0]
        return result, store.get_ad_for_line(line.id)

    def test_review_queue_and_approve(self, booking, store, review):
        _, ad = self._order_ad(booking, store)
        assert [a.id for a in review.review_queue()] == [ad.id]
        assert review.approve(ad.id).status == AdStatus.approved
        assert review.review_queue() == []

    def test_submit_creative_persists(self, booking, store, review):
        _, ad = self._order_ad(booking, store)
        review.submit_creative(ad.id, Creative(headline="Hello Tribeca", click_url="https://example.com"))
        assert store.get_ad(ad.id).creative.headline == "Hello Tribeca"

    def test_pause_resume_persist(self, booking, store, review):
        result, ad = self._order_ad(booking, store)
        review.approve(ad.id)
        booking.confirm_payment(result.session_id)
        paused = review.pause(ad.id)
        assert store.get_ad(ad.id).status == AdStatus.paused
        assert paused.end_date == TUESDAY
        assert review.resume(ad.id).status == AdStatus.active

    def test_rejecting_paid_ad_queues_task(self, booking, store, review):
        result, ad = self._order_ad(booking, store)
        booking.confirm_payment(result.session_id)
        review.reject(ad.id, "prohibited category")
        assert [t.kind for t in store.list_tasks()] == ["paid_ad_rejected"]

    def test_unknown_ad(self, review):
        with pytest.raises(NotFoundError):
            review.approve("ad_missing")
