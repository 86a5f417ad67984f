"""
Abstract base class for backend adapters.

Defines the CRUD capability interface that every backend must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from datagate.core.models import Filter, HealthStatus, PaginatedResult, QueryOptions, Record


class DataAdapter(ABC):
    """Abstract base class for backend adapters.

    All operations are coroutines. Implementations signal a missing record
    on update/delete with ``NotFoundError`` and any backend failure with
    ``AdapterError``; ``find_one`` returns None instead of raising.
    """

    provider: str = "unknown"

    async def close(self) -> None:
        """Release backend resources. Adapters without any do nothing."""

    async def __aenter__(self) -> "DataAdapter":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    @abstractmethod
    async def find_many(
        self,
        table: str,
        options: Optional[QueryOptions] = None,
    ) -> PaginatedResult:
        """Return one page of records matching the options."""

    @abstractmethod
    async def find_one(self, table: str, record_id: str) -> Optional[Record]:
        """Return the record with the given id, or None if absent."""

    @abstractmethod
    async def create(self, table: str, data: Record) -> Record:
        """Insert a record and return it with its assigned id."""

    @abstractmethod
    async def create_many(self, table: str, items: list[Record]) -> list[Record]:
        """Insert several records, returned in input order."""

    @abstractmethod
    async def update(self, table: str, record_id: str, data: Record) -> Record:
        """Merge ``data`` into an existing record and return the result.

        Raises:
            NotFoundError: If no record has this id.
        """

    @abstractmethod
    async def delete(self, table: str, record_id: str) -> None:
        """Delete a record.

        Raises:
            NotFoundError: If no record has this id.
        """

    @abstractmethod
    async def delete_many(self, table: str, filters: list[Filter]) -> int:
        """Delete every record matching the filters and return how many."""

    @abstractmethod
    async def count(self, table: str, filters: Optional[list[Filter]] = None) -> int:
        """Count records matching the filters."""

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Report backend reachability and latency."""
