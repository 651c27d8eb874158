"""Port: neighborhood directory (external, read-only)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..domain.inventory import Neighborhood


@runtime_checkable
class NeighborhoodDirectory(Protocol):
    """Resolve neighborhoods and combo membership."""

    def get_neighborhood(self, neighborhood_id: str) -> Neighborhood | None: ...

    def list_components(self, combo_id: str) -> list[str]: ...

    def combos_containing(self, component_id: str) -> list[str]: ...
