"""
Parsing of the textual query syntax into the filter/query model.

Filters are written ``field:operator:value`` and ordering directives
``field:direction``. Both arrive as repeatable query-string parameters.
"""

import json
import re
from typing import Any

from datagate.core.exceptions import ValidationError
from datagate.core.models import Filter, Operator, OrderBy, SortDirection

_OPERATORS = {op.value: op for op in Operator}

# Plain column names only; PostgREST would read "rel(*)" as an embedded table
_COLUMN_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def _as_list(raw: str | list[str] | None) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    return list(raw)


def _decode_value(raw: str) -> Any:
    """Decode a filter value as JSON, falling back to the literal string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_filter(raw: str) -> Filter:
    """Parse a single ``field:operator:value`` filter.

    The value is everything after the second colon, so values may contain
    colons themselves. Numbers, booleans, null and arrays are recognised
    because the value is JSON-decoded when possible.

    Args:
        raw: Filter text.

    Returns:
        Parsed Filter.

    Raises:
        ValidationError: If the filter is malformed or uses an unknown operator.
    """
    parts = raw.split(":")
    if len(parts) < 3:
        raise ValidationError("filter", raw, "Expected field:operator:value")

    field_name, op_name = parts[0], parts[1]
    if not field_name:
        raise ValidationError("filter", raw, "Field name cannot be empty")

    operator = _OPERATORS.get(op_name)
    if operator is None:
        raise ValidationError(
            "filter",
            raw,
            f"Unknown operator '{op_name}' (expected one of {', '.join(_OPERATORS)})",
        )

    value = _decode_value(":".join(parts[2:]))
    if operator is Operator.IN and not isinstance(value, list):
        raise ValidationError("filter", raw, "Operator 'in' requires a JSON array")

    return Filter(field=field_name, operator=operator, value=value)


def parse_filters(raw: str | list[str] | None) -> list[Filter]:
    """Parse zero or more filters."""
    return [parse_filter(item) for item in _as_list(raw)]


def parse_order_by(raw: str | list[str] | None) -> list[OrderBy]:
    """Parse ``field:direction`` ordering directives.

    Direction is descending only when it is exactly ``desc``.

    Args:
        raw: One directive or a list of them.

    Returns:
        OrderBy list in the given priority order.
    """
    result = []
    for item in _as_list(raw):
        parts = item.split(":")
        field_name = parts[0]
        if not field_name:
            raise ValidationError("orderBy", item, "Field name cannot be empty")

        direction = parts[1] if len(parts) > 1 else None
        result.append(
            OrderBy(
                field=field_name,
                direction=SortDirection.DESC if direction == "desc" else SortDirection.ASC,
            )
        )
    return result


def parse_select(raw: str | None) -> list[str] | None:
    """Parse a comma-separated column list. Empty input selects everything."""
    if not raw:
        return None
    columns = [col.strip() for col in raw.split(",") if col.strip()]
    for col in columns:
        if not _COLUMN_PATTERN.fullmatch(col):
            raise ValidationError("select", col, "Expected a plain column name")
    return columns or None
