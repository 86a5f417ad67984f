"""
High-level programmatic API for datagate.

This module provides factories and async helpers for common operations.
For more control, use the underlying classes directly.

Example:
    import asyncio
    from datagate import create_adapter, create_service, query

    async def main():
        async with create_adapter("memory") as adapter:
            service = create_service(adapter, cache_ttl=30)
            await service.create("users", {"name": "bob", "age": 31})

            page = await query(service, "users", filters=["age:gte:18"])
            print(page.count, page.data)

    asyncio.run(main())
"""

from typing import Iterable, Optional

from datagate.adapters.base import DataAdapter
from datagate.adapters.memory import InMemoryAdapter
from datagate.adapters.supabase import SupabaseAdapter
from datagate.core.exceptions import ValidationError
from datagate.core.models import PaginatedResult, QueryOptions
from datagate.core.query import parse_filters, parse_order_by, parse_select
from datagate.services.data import DataService

PROVIDERS = ("memory", "supabase")


def create_adapter(
    provider: str = "memory",
    *,
    url: Optional[str] = None,
    key: Optional[str] = None,
    timeout: int = 30,
) -> DataAdapter:
    """Create a backend adapter by provider name.

    Args:
        provider: "memory" or "supabase".
        url: Supabase project URL (required for "supabase").
        key: Supabase service role or anon key (required for "supabase").
        timeout: Request timeout in seconds for remote providers.

    Returns:
        A ready-to-use adapter.

    Raises:
        ValidationError: If the provider is unknown or its settings are missing.

    Example:
        >>> adapter = create_adapter("supabase", url="https://xyz.supabase.co", key="...")
        >>> adapter.provider
        'supabase'
    """
    if provider == "memory":
        return InMemoryAdapter()

    if provider == "supabase":
        if not url:
            raise ValidationError("supabase_url", "", "A Supabase URL is required")
        if not key:
            raise ValidationError("supabase_key", "", "A Supabase key is required")
        return SupabaseAdapter(url, key, timeout=timeout)

    raise ValidationError("provider", provider, f"Expected one of {', '.join(PROVIDERS)}")


def create_service(
    adapter: DataAdapter,
    *,
    cache_ttl: float = 0,
    allowed_tables: Optional[Iterable[str]] = None,
) -> DataService:
    """Wrap an adapter in a DataService.

    Args:
        adapter: Backend adapter.
        cache_ttl: Seconds single-record reads stay cached (0 disables).
        allowed_tables: Optional table allow-list.
    """
    return DataService(adapter, cache_ttl=cache_ttl, allowed_tables=allowed_tables)


async def query(
    service: DataService,
    table: str,
    *,
    filters: Iterable[str] = (),
    order_by: Iterable[str] = (),
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    select: Optional[str] = None,
) -> PaginatedResult:
    """Run a list query written in the query-string syntax.

    Args:
        service: Data service to query.
        table: Table name.
        filters: Filters like "age:gte:18".
        order_by: Ordering directives like "name:desc".
        limit: Page size.
        offset: Records to skip.
        select: Comma-separated column list.

    Returns:
        PaginatedResult for the requested page.

    Example:
        >>> page = asyncio.run(query(service, "users", filters=["name:eq:bob"]))
        >>> page.has_more
        False
    """
    options = QueryOptions(
        filters=parse_filters(list(filters)),
        order_by=parse_order_by(list(order_by)),
        limit=limit,
        offset=offset,
        select=parse_select(select),
    )
    return await service.find_many(table, options)
