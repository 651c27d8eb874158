"""BookingService: cart validation, atomic reservation, payment and activation.

Flow::

    validate_cart -> create_order (reserve slots + pending order, open session)
        -> confirm_payment (processor webhook / poll / operator) -> activate ads
    expire_stale_orders releases reservations of orders nobody paid for.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Iterable

from ..config.runtime import RuntimeSettings
from ..domain import ad_lifecycle
from ..domain.errors import (
    AdSlotError,
    CartValidationError,
    ConflictError,
    NotFoundError,
    PartialActivationFailure,
    PaymentConfirmationError,
    PaymentSetupError,
    PricingMismatchError,
    StaleOrderSweepFailure,
)
from ..domain.filters import SlotFilter
from ..domain.inventory import (
    Ad,
    AdScope,
    AdStatus,
    Neighborhood,
    OperatorTask,
    Order,
    OrderLine,
    OrderStatus,
    SlotKey,
)
from ..domain.pricing import PricingResolver
from ..domain.schedule import BookingWindow, campaign_window, placement_allowed_on
from ..models.requests import CartItem
from ..models.responses import (
    CheckoutResult,
    OrderConfirmation,
    PricedLine,
    SweepReport,
    ValidationResult,
)
from ..ports.clock import Clock, SystemClock
from ..ports.directory import NeighborhoodDirectory
from ..ports.id_gen import IdProvider, UuidIdProvider
from ..ports.inventory_store import InventoryStorePort
from ..ports.payments import PaymentProcessor
from .availability_service import overlapping_ids

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class BookingService:
    """Orchestrates the order lifecycle against the store and the payment processor."""

    def __init__(
        self,
        directory: NeighborhoodDirectory,
        store: InventoryStorePort,
        payments: PaymentProcessor,
        pricing: PricingResolver,
        settings: RuntimeSettings,
        clock: Clock | None = None,
        id_provider: IdProvider | None = None,
    ) -> None:
        self._directory = directory
        self._store = store
        self._payments = payments
        self._pricing = pricing
        self._settings = settings
        self._clock = clock or SystemClock()
        self._ids = id_provider or UuidIdProvider()

    # ------------------------------------------------------------------
    # Cart validation
    # ------------------------------------------------------------------

    def validate_cart(self, items: Iterable[CartItem], contact_email: str) -> ValidationResult:
        """Recheck every item against current state and resolve prices server-side.

        Items are checked in (neighborhood_id, date, placement_type) order so
        the first conflict reported is the same for the same cart.
        """
        items = list(items)
        if not items:
            raise CartValidationError("cart is empty")
        if len(items) > self._settings.max_cart_items:
            raise CartValidationError(
                f"cart has {len(items)} items; at most {self._settings.max_cart_items} allowed"
            )
        contact_email = (contact_email or "").strip()
        if not _EMAIL_RE.match(contact_email):
            raise CartValidationError(f"invalid contact email: {contact_email!r}")

        window = self._window()
        claimed: dict[SlotKey, CartItem] = {}
        lines: list[PricedLine] = []

        for item in sorted(items, key=lambda i: i.key.sort_key()):
            neighborhood = None
            if not item.is_takeover:
                neighborhood = self._directory.get_neighborhood(item.neighborhood_id)
                if neighborhood is None:
                    raise ConflictError(
                        f"Unknown neighborhood: {item.neighborhood_id}",
                        item=item,
                        reason="unknown_neighborhood",
                    )
            if not placement_allowed_on(item.placement_type, item.date, self._settings.weekly_weekday):
                raise ConflictError(
                    f"{item.placement_type.value} placement is not sold on {item.date.isoformat()} "
                    f"({item.date.strftime('%A')})",
                    item=item,
                    reason="wrong_day",
                )
            window.check_date(item.date)

            overlap = self._cart_overlap(neighborhood, item, claimed)
            if overlap is not None:
                raise ConflictError(
                    f"{item.label} on {item.date.isoformat()} overlaps {overlap.label} in the same cart",
                    item=item,
                    reason="duplicate",
                )
            for key in self._occupied_keys(neighborhood, item):
                claimed[key] = item

            watched = None if neighborhood is None else overlapping_ids(self._directory, neighborhood)
            taken = self._store.query_slots(
                SlotFilter.for_range(watched, item.placement_type.value, item.date, item.date)
            )
            if taken:
                slot = sorted(taken, key=lambda s: s.key.sort_key())[0]
                name = neighborhood.name if neighborhood is not None else "Global takeover"
                raise ConflictError(
                    f"{name} is no longer available on {item.date.isoformat()}{self._via(neighborhood, slot.key)}",
                    item=item,
                    reason=slot.state.value,
                )

            if neighborhood is None:
                price = self._pricing.takeover_price(item.placement_type)
            else:
                price = self._pricing.price_for(neighborhood, item.placement_type)
            if item.quoted_price_cents is not None and item.quoted_price_cents != price:
                raise PricingMismatchError(
                    f"price for {item.label} {item.placement_type.value} changed: "
                    f"quoted {item.quoted_price_cents}, current {price}",
                    item=item,
                    expected_cents=price,
                    quoted_cents=item.quoted_price_cents,
                )
            lines.append(
                PricedLine(
                    item=item,
                    neighborhood_name=neighborhood.name if neighborhood is not None else "Global takeover",
                    city=neighborhood.city if neighborhood is not None else "",
                    tier=neighborhood.tier if neighborhood is not None else None,
                    unit_price_cents=price,
                )
            )

        return ValidationResult(
            lines=lines,
            contact_email=contact_email,
            total_cents=sum(line.unit_price_cents for line in lines),
            currency=self._settings.currency,
        )

    # ------------------------------------------------------------------
    # Order creation
    # ------------------------------------------------------------------

    def create_order(self, validated: ValidationResult) -> CheckoutResult:
        """Reserve every slot atomically, then open a payment session for the total."""
        now = self._clock.now()
        order_id = self._ids.new_id("ord")
        lines = [
            OrderLine(
                id=self._ids.new_id("line"),
                order_id=order_id,
                neighborhood_id=pl.item.key.neighborhood_id,
                date=pl.item.date,
                placement_type=pl.item.placement_type,
                unit_price_cents=pl.unit_price_cents,
            )
            for pl in validated.lines
        ]
        total = sum(line.unit_price_cents for line in lines)
        order = Order(
            id=order_id,
            status=OrderStatus.pending,
            total_cents=total,
            currency=validated.currency,
            contact_email=validated.contact_email,
            created_at=now,
            lines=lines,
        )
        ads = [
            Ad(
                id=self._ids.new_id("ad"),
                order_line_id=line.id,
                status=AdStatus.pending_review,
                scope=AdScope.global_ if line.is_takeover else AdScope.neighborhood,
                neighborhood_id=None if line.is_takeover else line.neighborhood_id,
                placement_type=line.placement_type,
                created_at=now,
            )
            for line in lines
        ]

        self._store.reserve_order(order, ads, self._guard_keys(lines))
        logger.info(
            "order_reserved",
            extra={"order_id": order_id, "lines": len(lines), "total_cents": total},
        )

        try:
            session = self._payments.create_checkout_session(
                order_id=order_id,
                amount_cents=total,
                currency=order.currency,
                customer_email=order.contact_email,
                description=_describe(validated.lines),
            )
        except Exception as e:
            released = self._store.release_order(order_id)
            logger.error(
                "payment_setup_failed",
                extra={
                    "order_id": order_id,
                    "provider": self._payments.provider_name,
                    "released_slots": released,
                    "error": str(e),
                },
            )
            if isinstance(e, PaymentSetupError):
                raise
            raise PaymentSetupError(str(e)) from e

        self._store.attach_session(order_id, session.session_id)
        logger.info(
            "checkout_session_created",
            extra={"order_id": order_id, "session_id": session.session_id},
        )
        return CheckoutResult(
            order_id=order_id,
            total_cents=total,
            currency=order.currency,
            checkout_url=session.url,
            session_id=session.session_id,
        )

    def checkout(self, items: Iterable[CartItem], contact_email: str) -> CheckoutResult:
        return self.create_order(self.validate_cart(items, contact_email))

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def confirm_payment(
        self,
        session_id: str,
        amount_total: int | None = None,
        currency: str | None = None,
    ) -> OrderConfirmation:
        """Idempotent: a session that was already confirmed returns the stored result."""
        order = self._store.get_order_by_session(session_id)
        if order is None:
            self._queue("unknown_session", session_id=session_id, detail="no order for payment session")
            raise PaymentConfirmationError(
                f"no order for session {session_id}", session_id=session_id
            )

        mismatch = []
        if amount_total is not None and amount_total != order.total_cents:
            mismatch.append(f"amount {amount_total} != {order.total_cents}")
        if currency is not None and currency.lower() != order.currency:
            mismatch.append(f"currency {currency.lower()} != {order.currency}")
        if mismatch:
            detail = "; ".join(mismatch)
            self._queue("payment_mismatch", order_id=order.id, session_id=session_id, detail=detail)
            raise PaymentConfirmationError(
                f"payment for order {order.id} does not match: {detail}",
                session_id=session_id,
                order_id=order.id,
            )

        return self._finalize(order, session_id=session_id)

    def confirm_order_manually(self, order_id: str, operator: str) -> OrderConfirmation:
        """Administrative path into the same state machine as a processor confirmation."""
        order = self._store.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Unknown order: {order_id}")
        logger.warning(
            "manual_confirmation",
            extra={"order_id": order_id, "operator": operator, "status": order.status.value},
        )
        return self._finalize(order, session_id=order.session_id)

    def poll_session(self, session_id: str) -> OrderConfirmation:
        """Client-initiated status check; confirms if the processor reports paid."""
        order = self._store.get_order_by_session(session_id)
        if order is None:
            raise NotFoundError(f"Unknown checkout session: {session_id}")
        if order.status == OrderStatus.paid:
            return self._confirmation(order, already_confirmed=True)

        status = self._payments.retrieve_session(session_id)
        if not status.paid:
            return OrderConfirmation(order_id=order.id, status=order.status, total_cents=order.total_cents)
        return self.confirm_payment(session_id, status.amount_total, status.currency)

    def _finalize(self, order: Order, session_id: str | None) -> OrderConfirmation:
        if order.status == OrderStatus.paid:
            return self._confirmation(order, already_confirmed=True)

        paid_at = self._clock.now()
        if order.status == OrderStatus.abandoned:
            if not self._store.revive_order(order.id, paid_at, self._guard_keys(order.lines)):
                current = self._store.get_order(order.id)
                if current is not None and current.status == OrderStatus.paid:
                    return self._confirmation(current, already_confirmed=True)
                self._queue(
                    "late_payment_conflict",
                    order_id=order.id,
                    session_id=session_id,
                    detail="payment arrived after expiry and a slot was resold; refund required",
                )
                raise PaymentConfirmationError(
                    f"late payment for abandoned order {order.id} cannot be honored",
                    session_id=session_id,
                    order_id=order.id,
                )
            logger.warning("late_payment_revived", extra={"order_id": order.id, "session_id": session_id})
        elif not self._store.mark_order_paid(order.id, paid_at):
            # Lost the compare-and-swap to another confirmation or to the sweep.
            current = self._store.get_order(order.id)
            if current is None:
                raise NotFoundError(f"Unknown order: {order.id}")
            return self._finalize(current, session_id)

        activated, failed = self._activate(order)
        logger.info(
            "order_paid",
            extra={
                "order_id": order.id,
                "session_id": session_id,
                "activated": len(activated),
                "failed": len(failed),
            },
        )
        return OrderConfirmation(
            order_id=order.id,
            status=OrderStatus.paid,
            total_cents=order.total_cents,
            activated_ad_ids=activated,
            failed_line_ids=failed,
        )

    def _activate(self, order: Order) -> tuple[list[str], list[str]]:
        activated: list[str] = []
        failed: list[str] = []
        for line in order.lines:
            try:
                ad = self._store.get_ad_for_line(line.id)
                if ad is None:
                    raise PartialActivationFailure(
                        f"no ad for line {line.id}", order_id=order.id, line_id=line.id
                    )
                start, end = campaign_window(line.placement_type, line.date)
                updated = ad_lifecycle.apply_payment(ad, start, end)
                if updated is not ad:
                    self._store.save_ad(updated)
                activated.append(ad.id)
            except Exception as e:
                # Order stays paid; the line is flagged for an operator.
                failure = e if isinstance(e, PartialActivationFailure) else PartialActivationFailure(
                    str(e), order_id=order.id, line_id=line.id
                )
                logger.error(
                    "activation_failed",
                    extra={"order_id": order.id, "line_id": line.id, "error": str(failure)},
                )
                self._store.flag_line(line.id, str(failure))
                self._queue(
                    "activation_failed",
                    order_id=order.id,
                    detail=f"line {line.id}: {failure}",
                )
                failed.append(line.id)
        return activated, failed

    def _confirmation(self, order: Order, *, already_confirmed: bool) -> OrderConfirmation:
        activated: list[str] = []
        failed: list[str] = []
        pending: list[str] = []
        for line in order.lines:
            if line.activation_error:
                failed.append(line.id)
                continue
            ad = self._store.get_ad_for_line(line.id)
            if ad is not None and ad.paid:
                activated.append(ad.id)
            else:
                # Paid order whose confirming call has not reached this line yet.
                pending.append(line.id)
        return OrderConfirmation(
            order_id=order.id,
            status=order.status,
            total_cents=order.total_cents,
            activated_ad_ids=activated,
            failed_line_ids=failed,
            pending_line_ids=pending,
            already_confirmed=already_confirmed,
        )

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    def expire_stale_orders(self, older_than: timedelta | None = None) -> SweepReport:
        """Abandon pending orders created before ``now - older_than`` and free their slots."""
        if older_than is None:
            older_than = timedelta(minutes=self._settings.pending_order_timeout_minutes)
        cutoff = self._clock.now() - older_than
        try:
            expired = self._store.expire_pending_orders(cutoff)
        except AdSlotError:
            raise
        except Exception as e:
            logger.error("stale_order_sweep_failed", extra={"cutoff": cutoff.isoformat(), "error": str(e)})
            raise StaleOrderSweepFailure(f"sweep failed: {e}") from e

        report = SweepReport(
            abandoned_order_ids=[order_id for order_id, _ in expired],
            released_slots=sum(released for _, released in expired),
        )
        if expired:
            logger.info(
                "stale_orders_expired",
                extra={"orders": len(expired), "released_slots": report.released_slots},
            )
        return report

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _window(self) -> BookingWindow:
        return BookingWindow.from_now(
            self._clock.now(),
            lead_hours=self._settings.booking_lead_hours,
            max_days=self._settings.booking_max_days,
        )

    @staticmethod
    def _occupied_keys(neighborhood: Neighborhood | None, item: CartItem) -> list[SlotKey]:
        keys = [item.key]
        if neighborhood is not None and neighborhood.is_combo:
            keys += [
                SlotKey(neighborhood_id=component_id, date=item.date, placement_type=item.placement_type)
                for component_id in neighborhood.component_ids
            ]
        return keys

    def _cart_overlap(
        self,
        neighborhood: Neighborhood | None,
        item: CartItem,
        claimed: dict[SlotKey, CartItem],
    ) -> CartItem | None:
        """Earlier item in the same cart that shares exposure with ``item``."""
        if neighborhood is None:
            for key, other in claimed.items():
                if key.date == item.date and key.placement_type == item.placement_type:
                    return other
            return None
        for neighborhood_id in overlapping_ids(self._directory, neighborhood):
            key = SlotKey(neighborhood_id=neighborhood_id, date=item.date, placement_type=item.placement_type)
            if key in claimed:
                return claimed[key]
        return None

    @staticmethod
    def _via(neighborhood: Neighborhood | None, key: SlotKey) -> str:
        if key.is_takeover:
            return "" if neighborhood is None else " (global takeover)"
        if neighborhood is None:
            return f" ({key.neighborhood_id})"
        if key.neighborhood_id == neighborhood.id:
            return ""
        if key.neighborhood_id in neighborhood.component_ids:
            return f" (component {key.neighborhood_id})"
        return f" (combo {key.neighborhood_id})"

    def _guard_keys(self, lines: list[OrderLine]) -> list[SlotKey]:
        """Slots outside the lines themselves that must stay open for the lines to sell.

        Takeover lines need every slot on their date open; the store checks
        that itself.
        """
        keys: list[SlotKey] = []
        for line in lines:
            if line.is_takeover:
                continue
            neighborhood = self._directory.get_neighborhood(line.neighborhood_id)
            if neighborhood is None:
                continue
            keys += [
                SlotKey(neighborhood_id=neighborhood_id, date=line.date, placement_type=line.placement_type)
                for neighborhood_id in overlapping_ids(self._directory, neighborhood)
                if neighborhood_id != line.neighborhood_id
            ]
        return keys

    def _queue(
        self,
        kind: str,
        *,
        order_id: str | None = None,
        session_id: str | None = None,
        detail: str = "",
    ) -> OperatorTask:
        task = self._store.enqueue_task(
            OperatorTask(
                kind=kind,
                order_id=order_id,
                session_id=session_id,
                detail=detail,
                created_at=self._clock.now(),
            )
        )
        logger.warning(
            "operator_task_queued",
            extra={"task_id": task.id, "kind": kind, "order_id": order_id, "session_id": session_id},
        )
        return task


def _describe(lines: list[PricedLine]) -> str:
    names = sorted({pl.neighborhood_name for pl in lines})
    shown = ", ".join(names[:3])
    if len(names) > 3:
        shown += f" +{len(names) - 3} more"
    noun = "placement" if len(lines) == 1 else "placements"
    return f"{len(lines)} ad {noun}: {shown}"
