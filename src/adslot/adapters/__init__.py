"""Concrete adapters (SQLite, JSON directory, payment processors)."""

from .json_directory import JsonNeighborhoodDirectory
from .mock_payments import MockPaymentProcessor
from .sqlite_store import SqliteInventoryStore
from .stripe_payments import StripePaymentProcessor

__all__ = [
    "JsonNeighborhoodDirectory",
    "MockPaymentProcessor",
    "SqliteInventoryStore",
    "StripePaymentProcessor",
]
