"""Typed predicates for inventory and ad queries."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, Field, model_validator


class FilterOp(str, Enum):
    """Supported filter operators."""

    equals = "equals"           # field == value
    any_of = "any_of"           # field in [values]
    not_in = "not_in"           # field not in [values]
    gte = "gte"                 # field >= value
    lte = "lte"                 # field <= value


FilterValue = str | int | bool | date | list[str]


class FieldFilter(BaseModel):
    """A single typed filter condition on a stored column."""

    field: str = Field(..., description="Column name")
    op: FilterOp = Field(..., description="Filter operator")
    value: FilterValue = Field(..., description="Comparison value(s)")

    @model_validator(mode="after")
    def _list_ops(self) -> "FieldFilter":
        if self.op in (FilterOp.any_of, FilterOp.not_in) and not isinstance(self.value, list):
            self.value = [self.value]
        return self


class QueryFilter(BaseModel):
    """Conjunction of field filters against one table."""

    allowed_fields: ClassVar[frozenset[str]] = frozenset()

    must: list[FieldFilter] = Field(default_factory=list)

    @model_validator(mode="after")
    def _known_fields(self) -> "QueryFilter":
        for f in self.must:
            if f.field not in self.allowed_fields:
                raise ValueError(f"unsupported filter field {f.field!r}")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.must

    def where(self, field: str, op: FilterOp, value: FilterValue) -> "QueryFilter":
        """Return a copy with one more condition."""
        return type(self)(must=[*self.must, FieldFilter(field=field, op=op, value=value)])


class SlotFilter(QueryFilter):
    allowed_fields: ClassVar[frozenset[str]] = frozenset(
        {"neighborhood_id", "date", "placement_type", "state", "order_id"}
    )

    @classmethod
    def for_range(
        cls,
        neighborhood_ids: list[str] | None,
        placement_type: str,
        start: date,
        end: date,
    ) -> "SlotFilter":
        """Slots in [start, end]. ``None`` ids match every neighborhood."""
        must = [
            FieldFilter(field="placement_type", op=FilterOp.equals, value=placement_type),
            FieldFilter(field="date", op=FilterOp.gte, value=start),
            FieldFilter(field="date", op=FilterOp.lte, value=end),
        ]
        if neighborhood_ids is not None:
            must.insert(0, FieldFilter(field="neighborhood_id", op=FilterOp.any_of, value=list(neighborhood_ids)))
        return cls(must=must)


class AdFilter(QueryFilter):
    allowed_fields: ClassVar[frozenset[str]] = frozenset(
        {
            "id",
            "status",
            "scope",
            "neighborhood_id",
            "placement_type",
            "start_date",
            "end_date",
            "paid",
            "order_line_id",
        }
    )
