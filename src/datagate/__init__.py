"""
datagate

A provider-agnostic CRUD data-access layer exposed over a generic REST API.
Requests are validated, translated into a small filter/query vocabulary and
dispatched to a pluggable backend adapter, with a TTL cache for
single-record reads.

Quick Start:
    >>> import asyncio
    >>> from datagate import InMemoryAdapter, DataService
    >>> service = DataService(InMemoryAdapter(), cache_ttl=30)
    >>> user = asyncio.run(service.create("users", {"name": "bob"}))
    >>> user["name"]
    'bob'

    # Or serve it over HTTP:
    $ datagate serve --cache-ttl 30
"""

__version__ = "0.1.0"

# High-level API (recommended for most users)
from datagate.api import create_adapter, create_service, query

# Adapters
from datagate.adapters import DataAdapter, InMemoryAdapter, SupabaseAdapter

# Cache
from datagate.cache import CacheLayer

# Exceptions
from datagate.core.exceptions import (
    AdapterError,
    DataError,
    DatagateError,
    ErrorCode,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

# Data models
from datagate.core.models import (
    Filter,
    HealthStatus,
    Operator,
    OrderBy,
    PaginatedResult,
    QueryOptions,
    Record,
    SortDirection,
)
from datagate.core.query import parse_filter, parse_filters, parse_order_by, parse_select
from datagate.services import DataService

__all__ = [
    # Version
    "__version__",
    # High-level API
    "create_adapter",
    "create_service",
    "query",
    # Models
    "Filter",
    "HealthStatus",
    "Operator",
    "OrderBy",
    "PaginatedResult",
    "QueryOptions",
    "Record",
    "SortDirection",
    # Parsing
    "parse_filter",
    "parse_filters",
    "parse_order_by",
    "parse_select",
    # Core
    "CacheLayer",
    "DataAdapter",
    "DataService",
    "InMemoryAdapter",
    "SupabaseAdapter",
    # Exceptions
    "DatagateError",
    "DataError",
    "ErrorCode",
    "ValidationError",
    "NotFoundError",
    "AdapterError",
    "RateLimitError",
]
