"""
Tests for JSON <-> cell conversion.

Tests cover:
- Column lookup (exact, camelCase, case-insensitive, snake_case keys)
- Leaf conversions for every column kind
- The attrs column
- Row -> request body serialization
"""

from decimal import Decimal

import pytest

from openapi_fdw.adapter.cells import (
    FROM_JSON,
    TO_JSON,
    cell_to_json,
    json_to_cell,
    lookup_value,
    row_to_body,
    row_to_dict,
)
from openapi_fdw.errors import CellConversionError
from openapi_fdw.host.clock import SystemClock
from openapi_fdw.host.types import Cell, Column, Row, TypeOid
from openapi_fdw.utils import loads_or_none

# 2024-01-15T10:30:00Z
TS_MICROS = 1_705_314_600_000_000
# 2024-01-15T00:00:00Z
DATE_SECONDS = 1_705_276_800


@pytest.fixture
def clock():
    return SystemClock()


def _convert(value, kind, clock, name="value"):
    return json_to_cell({name: value}, Column(name, kind), clock)


class TestLookupValue:
    """Tests for column lookup order."""

    def test_exact_key(self):
        assert lookup_value({"user_name": "a", "userName": "b"}, "user_name") == "a"

    def test_camel_case_key(self):
        assert lookup_value({"userName": "b"}, "user_name") == "b"

    def test_case_insensitive_key(self):
        assert lookup_value({"USERNAME": "c"}, "username") == "c"

    def test_camel_case_column_case_insensitive(self):
        assert lookup_value({"USERNAME": "c"}, "userName") == "c"

    @pytest.mark.parametrize(
        ("key", "column"),
        [
            ("userID", "user_id"),
            ("HTTPStatus", "http_status"),
            ("first-name", "first_name"),
            ("created.at", "created_at"),
        ],
    )
    def test_snake_case_of_key(self, key, column):
        assert lookup_value({key: "v"}, column) == "v"

    def test_earlier_steps_win_over_snake_case_match(self):
        assert lookup_value({"userID": "snake", "userId": "camel"}, "user_id") == "camel"

    def test_absent(self):
        assert lookup_value({"other": 1}, "user_name") is None

    def test_non_object_row(self):
        assert lookup_value([1, 2], "id") is None


class TestJsonToCell:
    """Tests for scan-direction conversion."""

    def test_missing_and_null_leave_cell_unset(self, clock):
        assert json_to_cell({}, Column("name", TypeOid.STRING), clock) is None
        assert _convert(None, TypeOid.STRING, clock) is None

    def test_bool(self, clock):
        assert _convert(True, TypeOid.BOOL, clock) == Cell(TypeOid.BOOL, True)
        assert _convert("true", TypeOid.BOOL, clock) is None

    def test_integers(self, clock):
        assert _convert(42, TypeOid.I64, clock) == Cell(TypeOid.I64, 42)
        assert _convert(42, TypeOid.I32, clock) == Cell(TypeOid.I32, 42)
        assert _convert(42.5, TypeOid.I64, clock) is None
        assert _convert(True, TypeOid.I64, clock) is None

    def test_narrow_integers_wrap(self, clock):
        assert _convert(300, TypeOid.I8, clock) == Cell(TypeOid.I8, 44)
        assert _convert(2**31, TypeOid.I32, clock) == Cell(TypeOid.I32, -(2**31))

    def test_out_of_range_integer(self, clock):
        assert _convert(2**64, TypeOid.I64, clock) is None

    def test_floats(self, clock):
        assert _convert(1.5, TypeOid.F64, clock) == Cell(TypeOid.F64, 1.5)
        assert _convert(2, TypeOid.F32, clock) == Cell(TypeOid.F32, 2.0)
        assert _convert("1.5", TypeOid.F64, clock) is None

    def test_float_overflow_leaves_cell_unset(self, clock):
        assert _convert(10**400, TypeOid.F64, clock) is None
        assert _convert(-(10**400), TypeOid.F32, clock) is None

    def test_numeric(self, clock):
        assert _convert(19.99, TypeOid.NUMERIC, clock) == Cell(TypeOid.NUMERIC, Decimal("19.99"))

    def test_string_passes_text(self, clock):
        assert _convert("hello", TypeOid.STRING, clock) == Cell(TypeOid.STRING, "hello")

    def test_string_serializes_non_text(self, clock):
        assert _convert({"a": 1}, TypeOid.STRING, clock) == Cell(TypeOid.STRING, '{"a":1}')
        assert _convert(7, TypeOid.STRING, clock) == Cell(TypeOid.STRING, "7")

    def test_date_truncated_to_day(self, clock):
        cell = _convert("2024-01-15T10:30:00Z", TypeOid.DATE, clock)
        assert cell == Cell(TypeOid.DATE, DATE_SECONDS)

    def test_plain_date(self, clock):
        assert _convert("2024-01-15", TypeOid.DATE, clock) == Cell(TypeOid.DATE, DATE_SECONDS)

    def test_timestamps(self, clock):
        for kind in (TypeOid.TIMESTAMP, TypeOid.TIMESTAMPTZ):
            assert _convert("2024-01-15T10:30:00Z", kind, clock) == Cell(kind, TS_MICROS)

    def test_timestamp_with_offset(self, clock):
        cell = _convert("2024-01-15T12:30:00+02:00", TypeOid.TIMESTAMPTZ, clock)
        assert cell.value == TS_MICROS

    def test_invalid_timestamp_raises(self, clock):
        with pytest.raises(CellConversionError):
            _convert("yesterday", TypeOid.TIMESTAMPTZ, clock)

    def test_non_string_timestamp(self, clock):
        assert _convert(1705314600, TypeOid.TIMESTAMPTZ, clock) is None

    def test_json(self, clock):
        assert _convert([1, "a"], TypeOid.JSON, clock) == Cell(TypeOid.JSON, '[1,"a"]')

    def test_uuid(self, clock):
        value = "8f14e45f-ceea-467f-a8d9-3d5c1e3b2a10"
        assert _convert(value, TypeOid.UUID, clock) == Cell(TypeOid.UUID, value)

    def test_other_kind_gets_json_text(self, clock):
        assert _convert({"a": 1}, TypeOid.OTHER, clock) == Cell(TypeOid.OTHER, '{"a":1}')

    def test_camel_case_lookup(self, clock):
        row = {"userName": "alice"}
        cell = json_to_cell(row, Column("user_name", TypeOid.STRING), clock)
        assert cell == Cell(TypeOid.STRING, "alice")

    def test_attrs_gets_whole_row(self, clock):
        row = {"id": "1", "extra": {"deep": True}}
        cell = json_to_cell(row, Column("attrs", TypeOid.JSON), clock)
        assert cell.kind is TypeOid.JSON
        assert loads_or_none(cell.value) == row


class TestRowToBody:
    """Tests for mutation-direction conversion."""

    def test_body_keys_and_values(self, clock):
        row = Row(
            cols=["id", "name", "age", "active", "attrs", "nickname"],
            cells=[
                Cell.string("u1"),
                Cell.string("Alice"),
                Cell(TypeOid.I32, 30),
                Cell(TypeOid.BOOL, True),
                Cell.json('{"ignored":true}'),
                None,
            ],
        )
        assert row_to_dict(row, clock) == {"id": "u1", "name": "Alice", "age": 30, "active": True}

    def test_compact_body(self, clock):
        row = Row(cols=["name"], cells=[Cell.string("Bob")])
        assert row_to_body(row, clock) == '{"name":"Bob"}'

    def test_timestamps_to_rfc3339(self, clock):
        assert cell_to_json(Cell(TypeOid.TIMESTAMPTZ, TS_MICROS), clock) == "2024-01-15T10:30:00+00:00"
        assert cell_to_json(Cell(TypeOid.DATE, DATE_SECONDS), clock) == "2024-01-15T00:00:00+00:00"

    def test_json_cell_embedded(self, clock):
        assert cell_to_json(Cell.json('{"a":[1]}'), clock) == {"a": [1]}
        assert cell_to_json(Cell.json("not json"), clock) is None

    def test_non_finite_floats_become_null(self, clock):
        assert cell_to_json(Cell(TypeOid.F64, float("nan")), clock) is None
        assert cell_to_json(Cell(TypeOid.F32, float("inf")), clock) is None

    def test_numeric_to_number(self, clock):
        assert cell_to_json(Cell(TypeOid.NUMERIC, Decimal("19.99")), clock) == 19.99

    def test_scan_then_body_keeps_column_names(self, clock):
        source = {"userName": "alice", "age": 30}
        columns = [Column("user_name", TypeOid.STRING), Column("age", TypeOid.I64)]
        row = Row(cols=[c.name for c in columns])
        for column in columns:
            row.push(json_to_cell(source, column, clock))
        assert row_to_dict(row, clock) == {"user_name": "alice", "age": 30}


class TestDispatchTables:
    """Tests for conversion table coverage."""

    def test_every_kind_has_conversions(self):
        assert set(FROM_JSON) == set(TypeOid)
        assert set(TO_JSON) == set(TypeOid)
