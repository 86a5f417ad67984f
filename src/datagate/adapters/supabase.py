"""
Supabase adapter.

Talks to the PostgREST endpoint every Supabase project exposes at
``/rest/v1``. Filters, ordering and pagination are translated into
PostgREST query parameters and headers so the backend does the work.
"""

import asyncio
import json
import logging
import re
import time
from typing import Any, Optional

import aiohttp

from datagate.adapters.base import DataAdapter
from datagate.core.exceptions import AdapterError, NotFoundError
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

# PostgREST operator prefix for each filter operator
_OPERATOR_PREFIXES: dict[Operator, str] = {
    Operator.EQ: "eq",
    Operator.NEQ: "neq",
    Operator.GT: "gt",
    Operator.GTE: "gte",
    Operator.LT: "lt",
    Operator.LTE: "lte",
    Operator.LIKE: "like",
    Operator.ILIKE: "ilike",
    Operator.IN: "in",
    Operator.IS: "is",
}

# "0-24/3573", "*/0" or "0-24/*"
_CONTENT_RANGE_PATTERN = re.compile(r"^(?:\d+-\d+|\*)/(\d+|\*)$")


def _format_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _format_list_item(value: Any) -> str:
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return _format_scalar(value)


def format_filter(f: Filter) -> tuple[str, str]:
    """Translate a filter into a PostgREST ``(column, "op.value")`` pair."""
    prefix = _OPERATOR_PREFIXES[f.operator]
    if f.operator is Operator.IN:
        items = ",".join(_format_list_item(v) for v in f.value)
        return f.field, f"{prefix}.({items})"
    return f.field, f"{prefix}.{_format_scalar(f.value)}"


def format_order(order_by: list[OrderBy]) -> str:
    """Translate sort keys into a PostgREST ``order`` parameter."""
    return ",".join(f"{key.field}.{key.direction.value}" for key in order_by)


def parse_content_range(header: Optional[str]) -> Optional[int]:
    """Extract the exact total from a ``Content-Range`` header.

    Returns:
        The total, or None if the header is missing or the total unknown.
    """
    if not header:
        return None
    match = _CONTENT_RANGE_PATTERN.match(header.strip())
    if not match or match.group(1) == "*":
        return None
    return int(match.group(1))


class SupabaseAdapter(DataAdapter):
    """Async adapter for a Supabase project's REST API.

    Owns an aiohttp session unless one is passed in, in which case the
    caller is responsible for closing it.
    """

    provider = "supabase"

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        url: str,
        key: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 30,
    ):
        """Initialize the Supabase adapter.

        Args:
            url: Project URL, e.g. ``https://xyz.supabase.co``.
            key: Service role key or anon key.
            session: Optional aiohttp session.
            timeout: Request timeout in seconds.
        """
        self.base_url = url.rstrip("/") + self.REST_PATH
        self.key = key
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _build_headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        table: str,
        *,
        params: Optional[list[tuple[str, str]]] = None,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
        allow_statuses: tuple[int, ...] = (),
    ) -> tuple[Any, Optional[int], int]:
        """Issue a PostgREST request.

        Returns:
            Tuple of (decoded JSON body or None, exact total from
            Content-Range or None, HTTP status).

        Raises:
            AdapterError: On transport failure or an error status.
        """
        url = f"{self.base_url}/{table}"
        logger.debug("%s %s %s", method, url, params)

        try:
            async with self.session.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers or self._build_headers(),
            ) as resp:
                text = await resp.text()
                total = parse_content_range(resp.headers.get("Content-Range"))

                if resp.status >= 400 and resp.status not in allow_statuses:
                    raise AdapterError(
                        operation,
                        details=self._error_message(text) or resp.reason,
                        status_code=resp.status,
                    )

                data = json.loads(text) if text else None
                return data, total, resp.status

        except aiohttp.ClientError as e:
            raise AdapterError(operation, details=str(e))
        except asyncio.TimeoutError:
            raise AdapterError(operation, details="Request timed out")
        except json.JSONDecodeError as e:
            raise AdapterError(operation, details=f"Invalid JSON response: {e}")

    @staticmethod
    def _error_message(text: str) -> Optional[str]:
        """Pull the ``message`` field out of a PostgREST error body."""
        try:
            payload = json.loads(text)
        except ValueError:
            return text or None
        if isinstance(payload, dict):
            return payload.get("message") or payload.get("error") or text
        return text

    @staticmethod
    def _filter_params(filters: Optional[list[Filter]]) -> list[tuple[str, str]]:
        return [format_filter(f) for f in filters or []]

    async def find_many(
        self,
        table: str,
        options: Optional[QueryOptions] = None,
    ) -> PaginatedResult:
        options = options or QueryOptions()
        limit = options.effective_limit
        offset = options.effective_offset

        if limit == 0:
            total = await self.count(table, options.filters)
            return PaginatedResult(data=[], count=total, limit=limit, offset=offset)

        params = [("select", ",".join(options.select) if options.select else "*")]
        params.extend(self._filter_params(options.filters))
        if options.order_by:
            params.append(("order", format_order(options.order_by)))

        headers = self._build_headers(
            **{
                "Range-Unit": "items",
                "Range": f"{offset}-{offset + limit - 1}",
                "Prefer": "count=exact",
            }
        )

        # 416 means the offset is past the end; the body is an error object
        rows, total, status = await self._request(
            "findMany", "GET", table, params=params, headers=headers, allow_statuses=(416,)
        )
        if status == 416 or not isinstance(rows, list):
            rows = []

        return PaginatedResult(
            data=rows,
            count=total if total is not None else offset + len(rows),
            limit=limit,
            offset=offset,
        )

    async def find_one(self, table: str, record_id: str) -> Optional[Record]:
        rows, _, _ = await self._request(
            "findOne",
            "GET",
            table,
            params=[("select", "*"), ("id", f"eq.{record_id}"), ("limit", "1")],
        )
        return rows[0] if rows else None

    async def create(self, table: str, data: Record) -> Record:
        rows, _, _ = await self._request(
            "create",
            "POST",
            table,
            body=data,
            headers=self._build_headers(Prefer="return=representation"),
        )
        if not rows:
            raise AdapterError("create", details="No row returned")
        return rows[0]

    async def create_many(self, table: str, items: list[Record]) -> list[Record]:
        if not items:
            return []
        rows, _, _ = await self._request(
            "createMany",
            "POST",
            table,
            body=items,
            headers=self._build_headers(Prefer="return=representation"),
        )
        return rows or []

    async def update(self, table: str, record_id: str, data: Record) -> Record:
        rows, _, _ = await self._request(
            "update",
            "PATCH",
            table,
            params=[("id", f"eq.{record_id}")],
            body=data,
            headers=self._build_headers(Prefer="return=representation"),
        )
        if not rows:
            raise NotFoundError(table, record_id)
        return rows[0]

    async def delete(self, table: str, record_id: str) -> None:
        rows, _, _ = await self._request(
            "delete",
            "DELETE",
            table,
            params=[("id", f"eq.{record_id}")],
            headers=self._build_headers(Prefer="return=representation"),
        )
        if not rows:
            raise NotFoundError(table, record_id)

    async def delete_many(self, table: str, filters: list[Filter]) -> int:
        _, total, _ = await self._request(
            "deleteMany",
            "DELETE",
            table,
            params=self._filter_params(filters),
            headers=self._build_headers(Prefer="count=exact"),
        )
        return total or 0

    async def count(self, table: str, filters: Optional[list[Filter]] = None) -> int:
        params = [("select", "*")]
        params.extend(self._filter_params(filters))
        _, total, _ = await self._request(
            "count",
            "HEAD",
            table,
            params=params,
            headers=self._build_headers(Prefer="count=exact"),
        )
        return total or 0

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        try:
            async with self.session.get(
                f"{self.base_url}/",
                headers=self._build_headers(),
            ) as resp:
                ok = resp.status < 500
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Supabase health check failed: %s", e)
            ok = False

        return HealthStatus(ok=ok, latency_ms=round((time.perf_counter() - start) * 1000, 2))
