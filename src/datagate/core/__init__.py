"""
Core module for datagate.

Contains the query model, parsing, validation and exceptions.
"""

from datagate.core.exceptions import (
    AdapterError,
    DataError,
    DatagateError,
    ErrorCode,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
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

__all__ = [
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
    # Exceptions
    "DatagateError",
    "DataError",
    "ErrorCode",
    "ValidationError",
    "NotFoundError",
    "AdapterError",
    "RateLimitError",
]
