"""Adapter: NeighborhoodDirectory loaded from a JSON file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from ..domain.inventory import Neighborhood


class JsonNeighborhoodDirectory:
    """Read-only directory keeping the component -> combos back-reference index.

    The JSON document is a list of neighborhood objects::

        [{"id": "nyc-tribeca", "name": "Tribeca", "city": "New York", "tier": 1}, ...]
    """

    def __init__(self, neighborhoods: Iterable[Neighborhood]) -> None:
        self._by_id: dict[str, Neighborhood] = {}
        for n in neighborhoods:
            if n.id in self._by_id:
                raise ValueError(f"duplicate neighborhood id {n.id!r}")
            self._by_id[n.id] = n
        self._combos_by_component: dict[str, list[str]] = {}
        self._validate_combos()

    @classmethod
    def from_file(cls, path: str | Path) -> "JsonNeighborhoodDirectory":
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError(f"{path}: expected a list of neighborhood objects")
        return cls(Neighborhood.model_validate(item) for item in raw)

    def _validate_combos(self) -> None:
        for n in self._by_id.values():
            if not n.is_combo:
                continue
            for component_id in n.component_ids:
                component = self._by_id.get(component_id)
                if component is None:
                    raise ValueError(f"combo {n.id!r} references unknown component {component_id!r}")
                if component.is_combo:
                    raise ValueError(f"combo {n.id!r} nests combo {component_id!r}")
                self._combos_by_component.setdefault(component_id, []).append(n.id)
        for combos in self._combos_by_component.values():
            combos.sort()

    def get_neighborhood(self, neighborhood_id: str) -> Neighborhood | None:
        return self._by_id.get(neighborhood_id)

    def list_components(self, combo_id: str) -> list[str]:
        n = self._by_id.get(combo_id)
        if n is None or not n.is_combo:
            return []
        return list(n.component_ids)

    def combos_containing(self, component_id: str) -> list[str]:
        return list(self._combos_by_component.get(component_id, []))

    def all(self) -> list[Neighborhood]:
        return sorted(self._by_id.values(), key=lambda n: n.id)
