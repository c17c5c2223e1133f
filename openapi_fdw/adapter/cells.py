"""
Conversion between JSON values and relational cells.

Scan direction (json_to_cell):
    Find the value for a column in a JSON row, then convert it to the
    column's cell kind. Missing and null values leave the column unset.

Mutation direction (row_to_body):
    Turn the cells of a host row into a JSON object body.

Both directions dispatch on TypeOid through tables that are checked at
import time to cover every kind, so adding a kind without a conversion
fails loudly.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from openapi_fdw.host.protocol import Clock
from openapi_fdw.host.types import Cell, Column, Row, TypeOid
from openapi_fdw.utils import dump_json, loads_or_none
from openapi_fdw.utils.naming import to_camel_case, to_snake_case

ATTRS_COLUMN = "attrs"

SECONDS_PER_DAY = 86_400
MICROS_PER_SECOND = 1_000_000


# =============================================================================
# Column Lookup
# =============================================================================


def lookup_value(row: Any, column_name: str) -> Any:
    """
    Find a column's value in a JSON row object.

    Tries, in order:
    1. Exact key
    2. camelCase form of the (snake_case) column name
    3. Case-insensitive key match
    4. Key whose snake_case form is the column name (userID -> user_id)

    Returns:
        The value, or None when absent or the row is not an object
    """
    if not isinstance(row, dict):
        return None

    if column_name in row:
        return row[column_name]

    camel = to_camel_case(column_name)
    if camel in row:
        return row[camel]

    lowered = column_name.lower()
    for key, value in row.items():
        if key.lower() == lowered:
            return value

    for key, value in row.items():
        if to_snake_case(key) == column_name:
            return value
    return None


# =============================================================================
# JSON -> Cell
# =============================================================================


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _wrap(value: int, bits: int) -> int:
    """Two's-complement narrowing cast."""
    mask = (1 << bits) - 1
    value &= mask
    return value - (1 << bits) if value >> (bits - 1) else value


def _integer(kind: TypeOid, bits: int) -> Callable[[Any, Clock], Cell | None]:
    def convert(value: Any, clock: Clock) -> Cell | None:
        if not _is_integer(value) or not -(2**63) <= value < 2**63:
            return None
        return Cell(kind, _wrap(value, bits))

    return convert


def _float(kind: TypeOid) -> Callable[[Any, Clock], Cell | None]:
    def convert(value: Any, clock: Clock) -> Cell | None:
        if not _is_number(value):
            return None
        try:
            return Cell(kind, float(value))
        except OverflowError:
            return None

    return convert


def _bool_cell(value: Any, clock: Clock) -> Cell | None:
    return Cell(TypeOid.BOOL, value) if isinstance(value, bool) else None


def _numeric_cell(value: Any, clock: Clock) -> Cell | None:
    return Cell(TypeOid.NUMERIC, Decimal(str(value))) if _is_number(value) else None


def _string_cell(value: Any, clock: Clock) -> Cell | None:
    if isinstance(value, str):
        return Cell(TypeOid.STRING, value)
    return Cell(TypeOid.STRING, dump_json(value))


def _date_cell(value: Any, clock: Clock) -> Cell | None:
    if not isinstance(value, str):
        return None
    seconds = clock.parse_rfc3339(value) // MICROS_PER_SECOND
    return Cell(TypeOid.DATE, seconds - seconds % SECONDS_PER_DAY)


def _timestamp(kind: TypeOid) -> Callable[[Any, Clock], Cell | None]:
    def convert(value: Any, clock: Clock) -> Cell | None:
        if not isinstance(value, str):
            return None
        return Cell(kind, clock.parse_rfc3339(value))

    return convert


def _json_cell(value: Any, clock: Clock) -> Cell | None:
    return Cell(TypeOid.JSON, dump_json(value))


def _uuid_cell(value: Any, clock: Clock) -> Cell | None:
    return Cell(TypeOid.UUID, value) if isinstance(value, str) else None


FROM_JSON: dict[TypeOid, Callable[[Any, Clock], Cell | None]] = {
    TypeOid.BOOL: _bool_cell,
    TypeOid.I8: _integer(TypeOid.I8, 8),
    TypeOid.I16: _integer(TypeOid.I16, 16),
    TypeOid.I32: _integer(TypeOid.I32, 32),
    TypeOid.I64: _integer(TypeOid.I64, 64),
    TypeOid.F32: _float(TypeOid.F32),
    TypeOid.F64: _float(TypeOid.F64),
    TypeOid.NUMERIC: _numeric_cell,
    TypeOid.STRING: _string_cell,
    TypeOid.DATE: _date_cell,
    TypeOid.TIMESTAMP: _timestamp(TypeOid.TIMESTAMP),
    TypeOid.TIMESTAMPTZ: _timestamp(TypeOid.TIMESTAMPTZ),
    TypeOid.JSON: _json_cell,
    TypeOid.UUID: _uuid_cell,
    TypeOid.OTHER: _json_cell,
}


def json_to_cell(row: Any, column: Column, clock: Clock) -> Cell | None:
    """
    Convert the value for one column of a JSON row.

    The `attrs` column always receives the whole row as JSON.

    Args:
        row: JSON row (normally an object)
        column: Target column
        clock: Time capability for date/timestamp parsing

    Returns:
        The cell, or None to leave the column unset

    Raises:
        CellConversionError: If a date/time string cannot be parsed
    """
    if column.name == ATTRS_COLUMN:
        return Cell(TypeOid.JSON, dump_json(row))

    value = lookup_value(row, column.name)
    if value is None:
        return None

    return FROM_JSON[column.type_oid](value, clock)


# =============================================================================
# Cell -> JSON
# =============================================================================


def _finite(value: Any) -> float | None:
    number = float(value)
    return number if math.isfinite(number) else None


def _date_json(value: Any, clock: Clock) -> str:
    return clock.to_rfc3339(value * MICROS_PER_SECOND)


def _timestamp_json(value: Any, clock: Clock) -> str:
    return clock.to_rfc3339(value)


def _passthrough(value: Any, clock: Clock) -> Any:
    return value


def _integer_json(value: Any, clock: Clock) -> int:
    return int(value)


TO_JSON: dict[TypeOid, Callable[[Any, Clock], Any]] = {
    TypeOid.BOOL: lambda value, clock: bool(value),
    TypeOid.I8: _integer_json,
    TypeOid.I16: _integer_json,
    TypeOid.I32: _integer_json,
    TypeOid.I64: _integer_json,
    TypeOid.F32: lambda value, clock: _finite(value),
    TypeOid.F64: lambda value, clock: _finite(value),
    TypeOid.NUMERIC: lambda value, clock: _finite(value),
    TypeOid.STRING: _passthrough,
    TypeOid.DATE: _date_json,
    TypeOid.TIMESTAMP: _timestamp_json,
    TypeOid.TIMESTAMPTZ: _timestamp_json,
    TypeOid.JSON: lambda value, clock: loads_or_none(value),
    TypeOid.UUID: lambda value, clock: str(value),
    TypeOid.OTHER: lambda value, clock: str(value),
}


def cell_to_json(cell: Cell, clock: Clock) -> Any:
    """Convert one cell to its JSON value."""
    return TO_JSON[cell.kind](cell.value, clock)


def row_to_dict(row: Row, clock: Clock) -> dict[str, Any]:
    """Map a host row to a JSON object, skipping `attrs` and unset cells."""
    body: dict[str, Any] = {}
    for col_name, cell in row.items():
        if col_name == ATTRS_COLUMN or cell is None:
            continue
        body[col_name] = cell_to_json(cell, clock)
    return body


def row_to_body(row: Row, clock: Clock) -> str:
    """Serialize a host row as a compact JSON request body."""
    return dump_json(row_to_dict(row, clock))


def _check_coverage(name: str, table: dict[TypeOid, Any]) -> None:
    missing = set(TypeOid) - set(table)
    if missing:
        raise RuntimeError(f"{name} has no conversion for {sorted(m.name for m in missing)}")


_check_coverage("FROM_JSON", FROM_JSON)
_check_coverage("TO_JSON", TO_JSON)
