"""Port: ID generation strategies."""

from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable


@runtime_checkable
class IdProvider(Protocol):
    """Generate unique identifiers for orders, lines and ads."""

    def new_id(self, prefix: str) -> str: ...


# ---------------------------------------------------------------------------
# Default implementation (pure stdlib, no infra deps)
# ---------------------------------------------------------------------------


class UuidIdProvider:
    """Uses uuid4, prefixed by entity type (``ord_``, ``line_``, ``ad_``)."""

    def new_id(self, prefix: str) -> str:
        return f"{prefix}_{uuid.uuid4().hex}"
