"""
Custom exceptions for datagate.

Every failure that crosses the service boundary is a ``DataError`` carrying
one of the ``ErrorCode`` values. The HTTP layer maps codes to status codes;
nothing in here knows about HTTP.
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Uniform error taxonomy for data access failures."""

    VALIDATION = "VALIDATION"  # Malformed table/id/filter input
    NOT_FOUND = "NOT_FOUND"  # Target record absent
    ADAPTER = "ADAPTER"  # Backend call failed
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value


class DatagateError(Exception):
    """Base exception for all datagate errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class DataError(DatagateError):
    """Raised by the data service and adapters.

    Subclasses fix the code; a bare ``DataError`` defaults to UNKNOWN.
    """

    code = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        details: str | None = None,
        code: ErrorCode | None = None,
    ):
        super().__init__(message, details=details)
        if code is not None:
            self.code = code


class ValidationError(DataError):
    """Raised when a table name, id, filter or request body is malformed."""

    code = ErrorCode.VALIDATION

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason


class NotFoundError(DataError):
    """Raised when a single-record update or delete targets a missing id."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, table: str, record_id: str):
        super().__init__(f"Not found: {table}/{record_id}")
        self.table = table
        self.record_id = record_id


class AdapterError(DataError):
    """Raised when a backend call fails."""

    code = ErrorCode.ADAPTER

    def __init__(
        self,
        operation: str,
        details: str | None = None,
        status_code: int | None = None,
    ):
        message = f"{operation} failed"
        if status_code:
            message += f" (status {status_code})"
        super().__init__(message, details=details)
        self.operation = operation
        self.status_code = status_code


class RateLimitError(DatagateError):
    """Raised when a client exceeds its request budget."""

    def __init__(self, client: str, reset_in: float | None = None):
        details = None
        if reset_in:
            details = f"Rate limit resets in {reset_in:.0f} seconds."
        super().__init__(f"Rate limit exceeded for {client}", details=details)
        self.client = client
        self.reset_in = reset_in
