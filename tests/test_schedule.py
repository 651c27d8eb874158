"""Tests for booking window, weekly-day rule and campaign windows."""

from datetime import date, datetime, timezone

import pytest

from adslot.domain.errors import BookingWindowError
from adslot.domain.inventory import PlacementType
from adslot.domain.schedule import BookingWindow, Month, campaign_window, placement_allowed_on

SUNDAY = 6


class TestMonth:
    def test_parse_string(self):
        m = Month.parse("2026-03")
        assert (m.year, m.month) == (2026, 3)
        assert str(m) == "2026-03"
        assert m.first_day == date(2026, 3, 1)
        assert m.last_day == date(2026, 3, 31)
        assert len(m.days()) == 31

    def test_parse_date(self):
        assert Month.parse(date(2026, 2, 14)).last_day == date(2026, 2, 28)

    @pytest.mark.parametrize("raw", ["2026-13", "March", "2026-3", ""])
    def test_parse_invalid(self, raw):
        with pytest.raises(BookingWindowError):
            Month.parse(raw)


class TestBookingWindow:
    def test_lead_time_rounds_up_to_next_day(self):
        window = BookingWindow.from_now(datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc), 48, 90)
        assert window.min_date == date(2026, 3, 5)
        assert window.max_date == date(2026, 5, 31)

    def test_lead_time_exactly_midnight(self):
        window = BookingWindow.from_now(datetime(2026, 3, 2, 0, 0, tzinfo=timezone.utc), 48, 90)
        assert window.min_date == date(2026, 3, 4)

    def test_check_date(self):
        window = BookingWindow(min_date=date(2026, 3, 5), max_date=date(2026, 5, 31))
        window.check_date(date(2026, 3, 5))
        with pytest.raises(BookingWindowError, match="too soon"):
            window.check_date(date(2026, 3, 4))
        with pytest.raises(BookingWindowError, match="too far"):
            window.check_date(date(2026, 6, 1))

    def test_check_month(self):
        window = BookingWindow(min_date=date(2026, 3, 5), max_date=date(2026, 5, 31))
        today = date(2026, 3, 2)
        window.check_month(Month.parse("2026-03"), today)
        window.check_month(Month.parse("2026-05"), today)
        with pytest.raises(BookingWindowError, match="past"):
            window.check_month(Month.parse("2026-02"), today)
        with pytest.raises(BookingWindowError, match="horizon"):
            window.check_month(Month.parse("2026-06"), today)


def test_weekly_only_on_weekly_day():
    assert placement_allowed_on(PlacementType.weekly, date(2026, 3, 15), SUNDAY)
    assert not placement_allowed_on(PlacementType.weekly, date(2026, 3, 16), SUNDAY)


def test_daily_not_on_weekly_day():
    assert placement_allowed_on(PlacementType.daily, date(2026, 3, 16), SUNDAY)
    assert not placement_allowed_on(PlacementType.daily, date(2026, 3, 15), SUNDAY)


def test_configurable_weekly_day():
    saturday = 5
    assert placement_allowed_on(PlacementType.weekly, date(2026, 3, 14), saturday)
    assert placement_allowed_on(PlacementType.daily, date(2026, 3, 15), saturday)


def test_campaign_windows():
    assert campaign_window(PlacementType.daily, date(2026, 3, 10)) == (date(2026, 3, 10), date(2026, 3, 10))
    assert campaign_window(PlacementType.weekly, date(2026, 3, 15)) == (date(2026, 3, 15), date(2026, 3, 21))
