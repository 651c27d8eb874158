"""Periodic stale-order sweep, isolated from request traffic."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta

from ..domain.errors import AdSlotError
from ..models.responses import SweepReport
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)


class SweepScheduler:
    """Runs ``expire_stale_orders`` every ``interval`` seconds on a daemon thread.

    A failed cycle is logged and the next one still runs on schedule.
    """

    def __init__(
        self,
        booking_service: BookingService,
        interval: float,
        older_than: timedelta | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._booking = booking_service
        self._interval = interval
        self._older_than = older_than
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.cycles = 0
        self.failures = 0

    def run_once(self) -> SweepReport | None:
        self.cycles += 1
        try:
            return self._booking.expire_stale_orders(self._older_than)
        except AdSlotError as e:
            self.failures += 1
            logger.error(
                "sweep_cycle_failed",
                extra={"cycle": self.cycles, "code": e.code, "error": str(e)},
            )
            return None

    def run_forever(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self._interval)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, name="adslot-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
