"""
Data service.

Sits between the HTTP layer and a backend adapter: validates identifiers,
converts backend failures into the uniform error taxonomy and caches
single-record reads.
"""

import logging
from typing import Iterable, Optional

from datagate.adapters.base import DataAdapter
from datagate.cache.memory import CacheLayer
from datagate.core.exceptions import AdapterError, DataError
from datagate.core.models import Filter, HealthStatus, PaginatedResult, QueryOptions, Record
from datagate.core.validation import validate_record_id, validate_table_name

logger = logging.getLogger(__name__)


class DataService:
    """Validated, cached access to a backend adapter.

    Validation always runs before the adapter is called. ``DataError``
    raised by an adapter (e.g. ``NotFoundError``) passes through untouched;
    anything else is wrapped in ``AdapterError``.

    Only ``find_one`` reads the cache. Creates and bulk deletes drop the
    whole table namespace, while updates and deletes drop a single entry.
    """

    def __init__(
        self,
        adapter: DataAdapter,
        *,
        cache_ttl: Optional[float] = None,
        allowed_tables: Optional[Iterable[str]] = None,
        cache: Optional[CacheLayer] = None,
    ):
        """Initialize the data service.

        Args:
            adapter: Backend adapter to delegate to.
            cache_ttl: Seconds a cached record stays fresh. Zero disables caching.
                ``None`` defers to the cache's own ``default_ttl``.
            allowed_tables: Optional allow-list of table names.
            cache: Cache store to use. A fresh one is created if omitted.
        """
        self.adapter = adapter
        self.cache_ttl = cache_ttl
        self.allowed_tables = frozenset(allowed_tables) if allowed_tables is not None else None
        self.cache = cache if cache is not None else CacheLayer(default_ttl=cache_ttl or 0)

    def _validate_table(self, table: str) -> None:
        validate_table_name(table, self.allowed_tables)

    def _invalidate_table(self, table: str) -> None:
        removed = self.cache.invalidate(self.cache.make_key(table, ""))
        if removed:
            logger.info("Invalidated %d cached records for table %s", removed, table)

    @staticmethod
    def _wrap(operation: str, error: Exception) -> AdapterError:
        return AdapterError(operation, details=str(error) or type(error).__name__)

    async def find_many(
        self,
        table: str,
        options: Optional[QueryOptions] = None,
    ) -> PaginatedResult:
        """Return one page of records. Never cached."""
        self._validate_table(table)
        try:
            return await self.adapter.find_many(table, options)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("findMany", e) from e

    async def find_one(self, table: str, record_id: str) -> Optional[Record]:
        """Return a single record, serving it from cache while fresh."""
        self._validate_table(table)
        validate_record_id(record_id)

        key = self.cache.make_key(table, record_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return dict(cached)

        try:
            result = await self.adapter.find_one(table, record_id)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("findOne", e) from e

        if result is not None:
            self.cache.set(key, dict(result), self.cache_ttl)
        return result

    async def create(self, table: str, data: Record) -> Record:
        self._validate_table(table)
        try:
            result = await self.adapter.create(table, data)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("create", e) from e

        self._invalidate_table(table)
        return result

    async def create_many(self, table: str, items: list[Record]) -> list[Record]:
        """Create several records; a single failure fails the whole batch."""
        self._validate_table(table)
        try:
            result = await self.adapter.create_many(table, items)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("createMany", e) from e

        self._invalidate_table(table)
        return result

    async def update(self, table: str, record_id: str, data: Record) -> Record:
        self._validate_table(table)
        validate_record_id(record_id)
        try:
            result = await self.adapter.update(table, record_id, data)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("update", e) from e

        self.cache.delete(self.cache.make_key(table, record_id))
        return result

    async def delete(self, table: str, record_id: str) -> None:
        self._validate_table(table)
        validate_record_id(record_id)
        try:
            await self.adapter.delete(table, record_id)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("delete", e) from e

        self.cache.delete(self.cache.make_key(table, record_id))

    async def delete_many(self, table: str, filters: list[Filter]) -> int:
        self._validate_table(table)
        try:
            count = await self.adapter.delete_many(table, filters)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("deleteMany", e) from e

        self._invalidate_table(table)
        return count

    async def count(self, table: str, filters: Optional[list[Filter]] = None) -> int:
        self._validate_table(table)
        try:
            return await self.adapter.count(table, filters or None)
        except DataError:
            raise
        except Exception as e:
            raise self._wrap("count", e) from e

    async def health_check(self) -> HealthStatus:
        """Report adapter health. Failures are reported, not raised."""
        try:
            return await self.adapter.health_check()
        except Exception as e:
            logger.warning("Health check failed for %s: %s", self.adapter.provider, e)
            return HealthStatus(ok=False, latency_ms=-1)
