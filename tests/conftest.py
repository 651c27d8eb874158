"""Shared fixtures: fixed clock, in-memory directory, tmp_path SQLite store, services."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from adslot.adapters.json_directory import JsonNeighborhoodDirectory
from adslot.adapters.mock_payments import MockPaymentProcessor
from adslot.adapters.sqlite_store import SqliteInventoryStore
from adslot.config.runtime import RuntimeSettings
from adslot.domain.inventory import Neighborhood, PlacementType
from adslot.domain.pricing import PricingResolver
from adslot.models.requests import CartItem
from adslot.services.admin_service import AdminService
from adslot.services.availability_service import AvailabilityService
from adslot.services.booking_service import BookingService
from adslot.services.feed_service import FeedService
from adslot.services.review_service import ReviewService

# Monday. Booking window is 2026-03-05 .. 2026-05-31; Sundays in March: 1, 8, 15, 22, 29.
NOW = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
TUESDAY = date(2026, 3, 10)
WEDNESDAY = date(2026, 3, 11)
SUNDAY = date(2026, 3, 15)


class FixedClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


NEIGHBORHOODS = [
    Neighborhood(id="tribeca", name="Tribeca", city="New York", tier=1),
    Neighborhood(id="soho", name="SoHo", city="New York", tier=1),
    Neighborhood(id="west-village", name="West Village", city="New York", tier=2),
    Neighborhood(
        id="downtown",
        name="Downtown",
        city="New York",
        tier=2,
        is_combo=True,
        component_ids=["tribeca", "soho"],
    ),
    Neighborhood(id="ostermalm", name="Östermalm", city="Stockholm", tier=3),
]


def cart_item(
    neighborhood_id: str | None,
    day: date = TUESDAY,
    placement: str = "daily",
    quoted: int | None = None,
) -> CartItem:
    return CartItem(
        neighborhood_id=neighborhood_id,
        date=day,
        placement_type=PlacementType(placement),
        quoted_price_cents=quoted,
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def settings(tmp_path) -> RuntimeSettings:
    return RuntimeSettings(
        _env_file=None,
        database_path=str(tmp_path / "adslot.db"),
        directory_path=str(tmp_path / "neighborhoods.json"),
    )


@pytest.fixture
def directory() -> JsonNeighborhoodDirectory:
    return JsonNeighborhoodDirectory(NEIGHBORHOODS)


@pytest.fixture
def store(settings) -> SqliteInventoryStore:
    return SqliteInventoryStore(settings.database_path)


@pytest.fixture
def payments() -> MockPaymentProcessor:
    return MockPaymentProcessor()


@pytest.fixture
def pricing(settings) -> PricingResolver:
    return PricingResolver(settings.price_table)


@pytest.fixture
def booking(directory, store, payments, pricing, settings, clock) -> BookingService:
    return BookingService(
        directory=directory,
        store=store,
        payments=payments,
        pricing=pricing,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def availability(directory, store, pricing, settings, clock) -> AvailabilityService:
    return AvailabilityService(directory, store, pricing, settings, clock=clock)


@pytest.fixture
def feed_service(directory, store, clock) -> FeedService:
    return FeedService(directory, store, clock=clock)


@pytest.fixture
def review(store, clock) -> ReviewService:
    return ReviewService(store, clock=clock)


@pytest.fixture
def admin(directory, store, clock) -> AdminService:
    return AdminService(directory, store, clock=clock)
