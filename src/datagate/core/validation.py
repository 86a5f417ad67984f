"""
Input validation utilities for datagate.

Table names and record ids end up in backend URLs and queries, so both are
checked against strict patterns before any adapter is called.
"""

import re

from datagate.core.exceptions import ValidationError

# Letter or underscore, then up to 62 word characters (Postgres identifier limit)
_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")

_RECORD_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,255}$")


def validate_table_name(
    table: str,
    allowed_tables: frozenset[str] | None = None,
) -> str:
    """Validate a table name and, optionally, its allow-list membership.

    Args:
        table: Table name taken from the request.
        allowed_tables: Optional allow-list. ``None`` allows any valid name.

    Returns:
        The table name, unchanged.

    Raises:
        ValidationError: If the name is malformed or not allowed.
    """
    if not isinstance(table, str) or not _TABLE_NAME_PATTERN.fullmatch(table):
        raise ValidationError(
            "table",
            table,
            "Table name must start with a letter or underscore and contain "
            "at most 63 letters, digits and underscores",
        )

    if allowed_tables is not None and table not in allowed_tables:
        raise ValidationError("table", table, "Table not allowed")

    return table


def validate_record_id(record_id: str) -> str:
    """Validate a record id.

    Args:
        record_id: Id taken from the request path.

    Returns:
        The id, unchanged.

    Raises:
        ValidationError: If the id is empty, too long or has invalid characters.
    """
    if not isinstance(record_id, str) or not _RECORD_ID_PATTERN.fullmatch(record_id):
        raise ValidationError(
            "id",
            record_id,
            "Id must be 1-255 letters, digits, underscores or hyphens",
        )
    return record_id


def parse_non_negative_int(name: str, raw: str | None) -> int | None:
    """Parse an optional non-negative integer query parameter.

    Args:
        name: Parameter name, used in the error.
        raw: Raw string value, or None if absent.

    Returns:
        The parsed integer, or None if ``raw`` is None or empty.

    Raises:
        ValidationError: If the value is not a non-negative integer.
    """
    if raw is None or raw == "":
        return None

    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(name, raw, "Must be an integer")

    if value < 0:
        raise ValidationError(name, raw, "Must not be negative")

    return value
