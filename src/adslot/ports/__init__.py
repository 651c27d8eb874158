"""Port interfaces (Protocols).

Application services depend only on these, never on concrete adapters.
No SQLite, HTTP or payment-provider imports allowed here.
"""

from .clock import Clock, SystemClock
from .directory import NeighborhoodDirectory
from .id_gen import IdProvider, UuidIdProvider
from .inventory_store import InventoryStorePort
from .payments import CheckoutSession, PaymentProcessor, SessionStatus

__all__ = [
    "CheckoutSession",
    "Clock",
    "IdProvider",
    "InventoryStorePort",
    "NeighborhoodDirectory",
    "PaymentProcessor",
    "SessionStatus",
    "SystemClock",
    "UuidIdProvider",
]
