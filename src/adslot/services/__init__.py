"""Application services."""

from .admin_service import AdminService
from .availability_service import AvailabilityService
from .booking_service import BookingService
from .feed_service import FeedService
from .review_service import ReviewService

__all__ = [
    "AdminService",
    "AvailabilityService",
    "BookingService",
    "FeedService",
    "ReviewService",
]
