"""
Foreign table generation from OpenAPI documents.
"""

from .generator import (
    ATTRS_COLUMN,
    ColumnDefinition,
    ImportScope,
    TableDefinition,
    TableGenerator,
    generate_all_tables,
    generate_tables,
    quote_ident,
    quote_literal,
)
from .types import SQL_TYPE_NAMES, sql_type_name, type_oid_for_schema

__all__ = [
    "ATTRS_COLUMN",
    "ColumnDefinition",
    "TableDefinition",
    "ImportScope",
    "TableGenerator",
    "generate_tables",
    "generate_all_tables",
    "quote_ident",
    "quote_literal",
    "SQL_TYPE_NAMES",
    "sql_type_name",
    "type_oid_for_schema",
]
