"""
Mapping from OpenAPI schema types to relational column types.

The same TypeOid set drives the cell mapper, so a column generated here
converts with the matching leaf conversion at scan time.
"""

from __future__ import annotations

from openapi_fdw.host.types import TypeOid
from openapi_fdw.spec.models import Schema

# SQL type name emitted in CREATE FOREIGN TABLE for each kind
SQL_TYPE_NAMES: dict[TypeOid, str] = {
    TypeOid.BOOL: "boolean",
    TypeOid.I8: "smallint",
    TypeOid.I16: "smallint",
    TypeOid.I32: "integer",
    TypeOid.I64: "bigint",
    TypeOid.F32: "real",
    TypeOid.F64: "double precision",
    TypeOid.NUMERIC: "numeric",
    TypeOid.STRING: "text",
    TypeOid.DATE: "date",
    TypeOid.TIMESTAMP: "timestamp",
    TypeOid.TIMESTAMPTZ: "timestamptz",
    TypeOid.JSON: "jsonb",
    TypeOid.UUID: "uuid",
    TypeOid.OTHER: "text",
}

_INTEGER_FORMATS = {
    "int32": TypeOid.I32,
    "int64": TypeOid.I64,
}

_NUMBER_FORMATS = {
    "float": TypeOid.F32,
    "double": TypeOid.F64,
}

_STRING_FORMATS = {
    "date": TypeOid.DATE,
    "date-time": TypeOid.TIMESTAMPTZ,
    "uuid": TypeOid.UUID,
}


def type_oid_for_schema(schema: Schema) -> TypeOid:
    """
    Pick the column kind for a resolved property schema.

    Objects, arrays, untyped and unknown types map to JSON.
    """
    schema_type = schema.schema_type
    fmt = schema.format or ""

    if schema_type == "boolean":
        return TypeOid.BOOL
    if schema_type == "integer":
        return _INTEGER_FORMATS.get(fmt, TypeOid.I64)
    if schema_type == "number":
        return _NUMBER_FORMATS.get(fmt, TypeOid.NUMERIC)
    if schema_type == "string":
        return _STRING_FORMATS.get(fmt, TypeOid.STRING)
    return TypeOid.JSON


def sql_type_name(type_oid: TypeOid) -> str:
    return SQL_TYPE_NAMES[type_oid]


_missing = set(TypeOid) - set(SQL_TYPE_NAMES)
if _missing:
    raise RuntimeError(f"SQL_TYPE_NAMES has no type for {sorted(m.name for m in _missing)}")
