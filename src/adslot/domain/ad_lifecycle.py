"""Ad state machine.

pending_review -> approved -> (payment) -> active <-> paused
pending_review -> rejected

Payment records the campaign window. An approved ad goes live on payment;
a paid ad still in review goes live the moment it is approved.
"""

from __future__ import annotations

from datetime import date

from .errors import InvalidTransitionError
from .inventory import Ad, AdStatus, Creative


def _require(ad: Ad, *allowed: AdStatus, action: str) -> None:
    if ad.status not in allowed:
        names = ", ".join(s.value for s in allowed)
        raise InvalidTransitionError(
            f"cannot {action} ad {ad.id} in status {ad.status.value} (expected {names})"
        )


def apply_payment(ad: Ad, start: date, end: date) -> Ad:
    """Record payment and the booked window. Repeat calls are no-ops."""
    if ad.paid and ad.start_date == start and ad.end_date == end:
        return ad
    _require(ad, AdStatus.pending_review, AdStatus.approved, action="activate")
    status = AdStatus.active if ad.status == AdStatus.approved else ad.status
    return ad.model_copy(update={"paid": True, "start_date": start, "end_date": end, "status": status})


def approve(ad: Ad) -> Ad:
    _require(ad, AdStatus.pending_review, action="approve")
    status = AdStatus.active if ad.paid else AdStatus.approved
    return ad.model_copy(update={"status": status, "status_reason": None})


def reject(ad: Ad, reason: str) -> Ad:
    _require(ad, AdStatus.pending_review, action="reject")
    if not reason.strip():
        raise InvalidTransitionError("rejection reason required")
    return ad.model_copy(update={"status": AdStatus.rejected, "status_reason": reason.strip()})


def pause(ad: Ad) -> Ad:
    # end_date is left untouched: paused time counts toward the campaign.
    _require(ad, AdStatus.active, action="pause")
    return ad.model_copy(update={"status": AdStatus.paused})


def resume(ad: Ad) -> Ad:
    _require(ad, AdStatus.paused, action="resume")
    return ad.model_copy(update={"status": AdStatus.active})


def submit_creative(ad: Ad, creative: Creative) -> Ad:
    _require(ad, AdStatus.pending_review, action="edit creative of")
    return ad.model_copy(update={"creative": creative})
