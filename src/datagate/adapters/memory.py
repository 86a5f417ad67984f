"""
In-memory adapter.

Keeps every table as a list of dicts inside the adapter instance. Useful for
tests and local development; nothing is persisted.
"""

import asyncio
import functools
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from datagate.adapters.base import DataAdapter
from datagate.core.exceptions import NotFoundError
from datagate.core.models import (
    Filter,
    HealthStatus,
    Operator,
    OrderBy,
    PaginatedResult,
    QueryOptions,
    Record,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    """Wrap an ordering comparison so None and mismatched types never match."""

    def evaluate(field_value: Any, condition_value: Any) -> bool:
        if field_value is None or condition_value is None:
            return False
        try:
            return bool(compare(field_value, condition_value))
        except TypeError:
            return False

    return evaluate


def _strip_wildcards(value: Any) -> str:
    return str(value).replace("%", "")


def _contains(field_value: Any, condition_value: Any) -> bool:
    if field_value is None:
        return False
    return _strip_wildcards(condition_value) in str(field_value)


def _icontains(field_value: Any, condition_value: Any) -> bool:
    if field_value is None:
        return False
    return _strip_wildcards(condition_value).lower() in str(field_value).lower()


def _member(field_value: Any, condition_value: Any) -> bool:
    return field_value in condition_value


_PREDICATES: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: lambda a, b: a == b,
    Operator.NEQ: lambda a, b: a != b,
    Operator.GT: _ordered(lambda a, b: a > b),
    Operator.GTE: _ordered(lambda a, b: a >= b),
    Operator.LT: _ordered(lambda a, b: a < b),
    Operator.LTE: _ordered(lambda a, b: a <= b),
    Operator.LIKE: _contains,
    Operator.ILIKE: _icontains,
    Operator.IN: _member,
    Operator.IS: lambda a, b: a == b,
}


def matches(record: Record, filters: list[Filter]) -> bool:
    """Return True if the record satisfies every filter."""
    return all(_PREDICATES[f.operator](record.get(f.field), f.value) for f in filters)


def _compare_values(a: Any, b: Any) -> int:
    # None sorts after every value, as Postgres does for ascending order
    if a is None:
        return 1
    if b is None:
        return -1
    try:
        return -1 if a < b else 1
    except TypeError:
        return -1 if str(a) < str(b) else 1


def _compare_records(order_by: list[OrderBy], a: Record, b: Record) -> int:
    for key in order_by:
        av, bv = a.get(key.field), b.get(key.field)
        if av == bv:
            continue
        cmp = _compare_values(av, bv)
        return -cmp if key.descending else cmp
    return 0


def _project(record: Record, select: Optional[list[str]]) -> Record:
    if not select:
        return dict(record)
    return {col: record[col] for col in select if col in record}


class InMemoryAdapter(DataAdapter):
    """Adapter backed by per-instance dictionaries."""

    provider = "memory"

    def __init__(self) -> None:
        self._tables: dict[str, list[Record]] = {}

    def _table(self, table: str) -> list[Record]:
        return self._tables.setdefault(table, [])

    def _index_of(self, table: str, record_id: str) -> int:
        for idx, record in enumerate(self._table(table)):
            if record.get("id") == record_id:
                return idx
        raise NotFoundError(table, record_id)

    def _filtered(self, table: str, filters: Optional[list[Filter]]) -> list[Record]:
        records = self._table(table)
        if not filters:
            return list(records)
        return [r for r in records if matches(r, filters)]

    async def find_many(
        self,
        table: str,
        options: Optional[QueryOptions] = None,
    ) -> PaginatedResult:
        options = options or QueryOptions()
        records = self._filtered(table, options.filters)

        if options.order_by:
            records.sort(
                key=functools.cmp_to_key(functools.partial(_compare_records, options.order_by))
            )

        limit = options.effective_limit
        offset = options.effective_offset
        page = records[offset:offset + limit]

        return PaginatedResult(
            data=[_project(r, options.select) for r in page],
            count=len(records),
            limit=limit,
            offset=offset,
        )

    async def find_one(self, table: str, record_id: str) -> Optional[Record]:
        for record in self._table(table):
            if record.get("id") == record_id:
                return dict(record)
        return None

    async def create(self, table: str, data: Record) -> Record:
        now = _now()
        record = {**data, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        self._table(table).append(record)
        logger.debug("Created %s/%s", table, record["id"])
        return dict(record)

    async def create_many(self, table: str, items: list[Record]) -> list[Record]:
        # gather() preserves argument order in its result
        return list(await asyncio.gather(*(self.create(table, item) for item in items)))

    async def update(self, table: str, record_id: str, data: Record) -> Record:
        records = self._table(table)
        idx = self._index_of(table, record_id)
        existing = records[idx]
        updated = {
            **existing,
            **data,
            "id": existing["id"],
            "created_at": existing.get("created_at"),
            "updated_at": _now(),
        }
        records[idx] = updated
        return dict(updated)

    async def delete(self, table: str, record_id: str) -> None:
        idx = self._index_of(table, record_id)
        del self._table(table)[idx]

    async def delete_many(self, table: str, filters: list[Filter]) -> int:
        records = self._table(table)
        kept = [r for r in records if not matches(r, filters)]
        self._tables[table] = kept
        return len(records) - len(kept)

    async def count(self, table: str, filters: Optional[list[Filter]] = None) -> int:
        return len(self._filtered(table, filters))

    async def health_check(self) -> HealthStatus:
        return HealthStatus(ok=True, latency_ms=0)
