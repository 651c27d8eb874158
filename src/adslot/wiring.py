"""Composition root: the single place where adapters are wired into services.

Call the ``build_*`` functions to get fully-constructed services with real
adapters. No ad-hoc construction elsewhere.
"""

from __future__ import annotations

from .adapters.json_directory import JsonNeighborhoodDirectory
from .adapters.mock_payments import MockPaymentProcessor
from .adapters.sqlite_store import SqliteInventoryStore
from .adapters.stripe_payments import StripePaymentProcessor
from .config.runtime import RuntimeSettings, get_settings
from .domain.fallback import FallbackAdSelector
from .domain.feed_engine import FeedInjectionEngine
from .domain.pricing import PricingResolver
from .ports.payments import PaymentProcessor
from .services.admin_service import AdminService
from .services.availability_service import AvailabilityService
from .services.booking_service import BookingService
from .services.feed_service import FeedService
from .services.review_service import ReviewService

_MOCK_PROCESSOR: MockPaymentProcessor | None = None


def build_store(settings: RuntimeSettings | None = None) -> SqliteInventoryStore:
    settings = settings or get_settings()
    return SqliteInventoryStore(settings.database_path)


def build_directory(settings: RuntimeSettings | None = None) -> JsonNeighborhoodDirectory:
    settings = settings or get_settings()
    return JsonNeighborhoodDirectory.from_file(settings.directory_path)


def build_payment_processor(settings: RuntimeSettings | None = None) -> PaymentProcessor:
    """Stripe when configured; otherwise a process-wide mock processor."""
    global _MOCK_PROCESSOR
    settings = settings or get_settings()
    if settings.payment_provider == "stripe":
        return StripePaymentProcessor(
            settings.stripe_secret_key,
            success_url=settings.checkout_success_url,
            cancel_url=settings.checkout_cancel_url,
            api_base=settings.stripe_api_base,
            timeout=settings.request_timeout_seconds,
        )
    if _MOCK_PROCESSOR is None:
        _MOCK_PROCESSOR = MockPaymentProcessor()
    return _MOCK_PROCESSOR


def build_availability_service(settings: RuntimeSettings | None = None) -> AvailabilityService:
    settings = settings or get_settings()
    return AvailabilityService(
        directory=build_directory(settings),
        store=build_store(settings),
        pricing=PricingResolver(settings.price_table),
        settings=settings,
    )


def build_booking_service(settings: RuntimeSettings | None = None) -> BookingService:
    settings = settings or get_settings()
    return BookingService(
        directory=build_directory(settings),
        store=build_store(settings),
        payments=build_payment_processor(settings),
        pricing=PricingResolver(settings.price_table),
        settings=settings,
    )


def build_feed_service(settings: RuntimeSettings | None = None) -> FeedService:
    settings = settings or get_settings()
    return FeedService(
        directory=build_directory(settings),
        store=build_store(settings),
        engine=FeedInjectionEngine(cadence=settings.feed_cadence),
        selector=FallbackAdSelector(),
    )


def build_review_service(settings: RuntimeSettings | None = None) -> ReviewService:
    settings = settings or get_settings()
    return ReviewService(store=build_store(settings))


def build_admin_service(settings: RuntimeSettings | None = None) -> AdminService:
    settings = settings or get_settings()
    return AdminService(directory=build_directory(settings), store=build_store(settings))
