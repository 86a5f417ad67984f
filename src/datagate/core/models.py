"""
Core data models for datagate.

This module defines the backend-neutral query vocabulary (operators, filters,
ordering, query options) and the result shapes returned by adapters.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# A record is a plain mapping; adapters guarantee an "id" key.
Record = dict[str, Any]

DEFAULT_LIMIT = 50


class Operator(Enum):
    """Comparison operators understood by every adapter."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"  # String contains
    ILIKE = "ilike"  # Case-insensitive string contains
    IN = "in"  # Set membership
    IS = "is"  # Null or exact match (booleans)

    def __str__(self) -> str:
        return self.value


class SortDirection(Enum):
    """Ordering direction for a sort key."""

    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Filter:
    """A single field/operator/value predicate."""

    field: str
    operator: Operator
    value: Any = None

    def __str__(self) -> str:
        return f"{self.field}:{self.operator}:{self.value}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "operator": self.operator.value,
            "value": self.value,
        }


@dataclass(frozen=True)
class OrderBy:
    """A sort key; keys are applied in listed priority order."""

    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "direction": self.direction.value}


@dataclass
class QueryOptions:
    """Result-shaping parameters for ``find_many``.

    Attributes:
        filters: Predicates combined with logical AND.
        order_by: Sort keys in priority order.
        limit: Page size. ``None`` means the adapter default.
        offset: Number of matching records to skip.
        select: Columns to return. ``None`` returns every column.
    """

    filters: list[Filter] = field(default_factory=list)
    order_by: list[OrderBy] = field(default_factory=list)
    limit: int | None = None
    offset: int | None = None
    select: list[str] | None = None

    @property
    def effective_limit(self) -> int:
        return DEFAULT_LIMIT if self.limit is None else self.limit

    @property
    def effective_offset(self) -> int:
        return 0 if self.offset is None else self.offset


@dataclass
class PaginatedResult:
    """One page of records plus the pre-pagination total."""

    data: list[Record]
    count: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        """True if records remain beyond this page."""
        return self.offset + len(self.data) < self.count

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape served over HTTP."""
        return {
            "data": self.data,
            "count": self.count,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
        }


@dataclass
class HealthStatus:
    """Backend reachability and round-trip latency."""

    ok: bool
    latency_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "latencyMs": self.latency_ms}
