"""
Tests for query-string parsing and the query model.
"""

import pytest

from datagate.core.exceptions import ErrorCode, ValidationError
from datagate.core.models import (
    Filter,
    Operator,
    OrderBy,
    PaginatedResult,
    QueryOptions,
    SortDirection,
)
from datagate.core.query import parse_filter, parse_filters, parse_order_by, parse_select


class TestParseFilter:
    """Tests for parse_filter."""

    def test_numeric_value_decoded_as_json(self):
        """Test that a numeric value becomes a number, not a string."""
        f = parse_filter("age:gte:18")
        assert f == Filter(field="age", operator=Operator.GTE, value=18)
        assert isinstance(f.value, int)
        assert f.to_dict() == {"field": "age", "operator": "gte", "value": 18}

    def test_plain_string_value(self):
        """Test that a non-JSON value stays a literal string."""
        f = parse_filter("name:eq:bob")
        assert f.to_dict() == {"field": "name", "operator": "eq", "value": "bob"}

    def test_json_literals(self):
        """Test booleans, null and arrays."""
        assert parse_filter("active:is:true").value is True
        assert parse_filter("deleted_at:is:null").value is None
        assert parse_filter('role:in:["admin","owner"]').value == ["admin", "owner"]
        assert parse_filter("score:lt:2.5").value == 2.5

    def test_quoted_json_string(self):
        """Test that a quoted value is unwrapped."""
        assert parse_filter('code:eq:"007"').value == "007"

    def test_value_keeps_colons(self):
        """Test that everything after the operator is the value."""
        f = parse_filter("starts_at:gt:2024-01-01T10:00:00")
        assert f.field == "starts_at"
        assert f.value == "2024-01-01T10:00:00"

    def test_empty_value(self):
        """Test that an empty value is the empty string."""
        assert parse_filter("name:eq:").value == ""

    @pytest.mark.parametrize("raw", ["name", "name:eq", ""])
    def test_too_few_segments(self, raw):
        """Test that malformed filters fail with VALIDATION naming the input."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter(raw)

        assert exc_info.value.code is ErrorCode.VALIDATION
        assert f"'{raw}'" in str(exc_info.value)

    def test_unknown_operator(self):
        """Test that unknown operators are rejected at parse time."""
        with pytest.raises(ValidationError, match="Unknown operator 'between'"):
            parse_filter("age:between:1")

    def test_empty_field(self):
        """Test that an empty field name is rejected."""
        with pytest.raises(ValidationError):
            parse_filter(":eq:1")

    def test_in_requires_array(self):
        """Test that 'in' with a scalar value is rejected."""
        with pytest.raises(ValidationError, match="JSON array"):
            parse_filter("role:in:admin")


class TestParseFilters:
    """Tests for parse_filters."""

    def test_none(self):
        assert parse_filters(None) == []

    def test_single_string(self):
        assert parse_filters("age:gt:1") == [Filter("age", Operator.GT, 1)]

    def test_list(self):
        filters = parse_filters(["age:gt:1", "name:ilike:%bo%"])
        assert [f.operator for f in filters] == [Operator.GT, Operator.ILIKE]


class TestParseOrderBy:
    """Tests for parse_order_by."""

    def test_directions(self):
        """Test explicit desc and implicit asc."""
        result = parse_order_by(["name:desc", "age"])
        assert result == [
            OrderBy(field="name", direction=SortDirection.DESC),
            OrderBy(field="age", direction=SortDirection.ASC),
        ]
        assert [o.to_dict() for o in result] == [
            {"field": "name", "direction": "desc"},
            {"field": "age", "direction": "asc"},
        ]

    def test_only_exact_desc_is_descending(self):
        """Test that anything other than 'desc' sorts ascending."""
        assert parse_order_by("name:DESC")[0].direction is SortDirection.ASC
        assert parse_order_by("name:descending")[0].direction is SortDirection.ASC
        assert parse_order_by("name:asc")[0].direction is SortDirection.ASC

    def test_none(self):
        assert parse_order_by(None) == []

    def test_empty_field(self):
        with pytest.raises(ValidationError):
            parse_order_by(":desc")


class TestParseSelect:
    """Tests for parse_select."""

    def test_columns(self):
        assert parse_select("id,name, age") == ["id", "name", "age"]

    def test_empty(self):
        assert parse_select(None) is None
        assert parse_select("") is None
        assert parse_select(" , ") is None

    @pytest.mark.parametrize("raw", ["*,secrets(*)", "*", "name:alias", "owner->>email"])
    def test_rejects_non_column_entries(self, raw):
        """Test that embeds, wildcards and casts are refused."""
        with pytest.raises(ValidationError) as exc_info:
            parse_select(raw)
        assert exc_info.value.field == "select"


class TestQueryModels:
    """Tests for QueryOptions and PaginatedResult."""

    def test_option_defaults(self):
        options = QueryOptions()
        assert options.effective_limit == 50
        assert options.effective_offset == 0
        assert options.select is None

    def test_has_more_uses_returned_count(self):
        """Test that has_more compares offset + returned rows to the total."""
        assert PaginatedResult(data=[{}, {}], count=3, limit=2, offset=0).has_more
        assert not PaginatedResult(data=[{}, {}], count=3, limit=2, offset=1).has_more
        # A short page at the end of the data
        assert not PaginatedResult(data=[{}], count=3, limit=5, offset=2).has_more

    def test_to_dict(self):
        result = PaginatedResult(data=[{"id": "a"}], count=4, limit=1, offset=0)
        assert result.to_dict() == {
            "data": [{"id": "a"}],
            "count": 4,
            "limit": 1,
            "offset": 0,
            "hasMore": True,
        }
