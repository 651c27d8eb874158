"""Calendar rules: booking window, weekly edition day, campaign windows."""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from .errors import BookingWindowError
from .inventory import PlacementType

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

WEEKLY_CAMPAIGN_DAYS = 7


@dataclass(frozen=True)
class Month:
    """A calendar month."""

    year: int
    month: int

    @classmethod
    def parse(cls, value: "str | date | Month") -> "Month":
        if isinstance(value, Month):
            return value
        if isinstance(value, date):
            return cls(value.year, value.month)
        match = _MONTH_RE.match(value.strip())
        if not match:
            raise BookingWindowError(f"month must be YYYY-MM, got {value!r}")
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            raise BookingWindowError(f"month out of range: {value!r}")
        return cls(year, month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def days(self) -> list[date]:
        first = self.first_day
        return [first + timedelta(days=i) for i in range(self.last_day.day)]

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class BookingWindow:
    """Earliest and latest bookable dates relative to ``now``."""

    min_date: date
    max_date: date

    @classmethod
    def from_now(cls, now: datetime, lead_hours: int, max_days: int) -> "BookingWindow":
        now = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
        earliest = now + timedelta(hours=lead_hours)
        latest = now + timedelta(days=max_days)
        # A date is bookable only if it starts after the lead time.
        min_date = earliest.date()
        if earliest.time() != datetime.min.time():
            min_date += timedelta(days=1)
        return cls(min_date=min_date, max_date=latest.date())

    def contains(self, day: date) -> bool:
        return self.min_date <= day <= self.max_date

    def check_date(self, day: date) -> None:
        if day < self.min_date:
            raise BookingWindowError(
                f"{day.isoformat()} is too soon; earliest bookable date is {self.min_date.isoformat()}"
            )
        if day > self.max_date:
            raise BookingWindowError(
                f"{day.isoformat()} is too far out; latest bookable date is {self.max_date.isoformat()}"
            )

    def check_month(self, month: Month, today: date) -> None:
        """Reject months that are entirely past or start beyond the horizon."""
        if month.last_day < today:
            raise BookingWindowError(f"month {month} is in the past")
        if month.first_day > self.max_date:
            raise BookingWindowError(
                f"month {month} is beyond the booking horizon ({self.max_date.isoformat()})"
            )


def placement_allowed_on(placement_type: PlacementType, day: date, weekly_weekday: int) -> bool:
    """Weekly runs only on the weekly day; daily runs on every other day."""
    on_weekly_day = day.weekday() == weekly_weekday
    if placement_type == PlacementType.weekly:
        return on_weekly_day
    return not on_weekly_day


def campaign_window(placement_type: PlacementType, day: date) -> tuple[date, date]:
    """Inclusive (start, end) an activated ad runs for a booked date."""
    if placement_type == PlacementType.weekly:
        return day, day + timedelta(days=WEEKLY_CAMPAIGN_DAYS - 1)
    return day, day
