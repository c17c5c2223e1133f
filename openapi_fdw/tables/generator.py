"""
Table generation from an OpenAPI document.

Each collection endpoint becomes one foreign table:

    /api/v1/user-accounts  ->  user_accounts (id bigint, ..., attrs jsonb)

Columns come from the properties of the row schema: the response
schema itself, the item schema of an array response, or the item schema
of an array under one of the wrapper keys row extraction looks for
(data, results, ...). Every table also gets an `attrs` column holding the
whole row as JSON, so fields the schema does not describe stay reachable.

An endpoint whose schema cannot be resolved to rows of objects still
produces a table, with `attrs` as its only column.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from openapi_fdw.adapter.cells import ATTRS_COLUMN
from openapi_fdw.adapter.heuristics import DATA_KEYS
from openapi_fdw.host.types import ImportForeignSchemaStmt, ImportSchemaType, TypeOid
from openapi_fdw.spec.endpoints import EndpointInfo, extract_endpoints
from openapi_fdw.spec.models import OpenApiSpec, Schema
from openapi_fdw.spec.resolver import SchemaResolver
from openapi_fdw.utils.naming import to_snake_case

from .types import sql_type_name, type_oid_for_schema

logger = logging.getLogger(__name__)

_PLAIN_IDENTIFIER = re.compile(r"[a-z_][a-z0-9_]*")

_RESERVED_WORDS = frozenset(
    {
        "all", "analyse", "analyze", "and", "any", "array", "as", "asc",
        "asymmetric", "both", "case", "cast", "check", "collate", "column",
        "constraint", "create", "current_date", "current_time",
        "current_timestamp", "current_user", "default", "deferrable", "desc",
        "distinct", "do", "else", "end", "except", "false", "fetch", "for",
        "foreign", "from", "grant", "group", "having", "in", "initially",
        "intersect", "into", "lateral", "leading", "limit", "localtime",
        "localtimestamp", "not", "null", "offset", "on", "only", "or", "order",
        "placing", "primary", "references", "returning", "select",
        "session_user", "some", "symmetric", "table", "then", "to", "trailing",
        "true", "union", "unique", "user", "using", "variadic", "when", "where",
        "window", "with",
    }
)


# =============================================================================
# Definitions
# =============================================================================


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    """
    A generated column.

    Attributes:
        name: snake_case column name
        type_oid: Cell kind used for conversion
        source: Property name in the API payload
    """

    name: str
    type_oid: TypeOid
    source: str | None = None

    @property
    def sql_type(self) -> str:
        return sql_type_name(self.type_oid)


@dataclass(frozen=True, slots=True)
class TableDefinition:
    """A foreign table generated for one endpoint."""

    name: str
    endpoint: str
    columns: tuple[ColumnDefinition, ...]
    rowid_column: str | None = None
    insertable: bool = False
    updatable: bool = False
    deletable: bool = False

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def options(self) -> dict[str, str]:
        """Table options carried into the foreign table definition."""
        options = {"endpoint": self.endpoint}
        if self.rowid_column:
            options["rowid_column"] = self.rowid_column
        options["insertable"] = _flag(self.insertable)
        options["updatable"] = _flag(self.updatable)
        options["deletable"] = _flag(self.deletable)
        return options

    def to_sql(self, server_name: str) -> str:
        """Render as a CREATE FOREIGN TABLE statement."""
        columns = ",\n".join(
            f"  {quote_ident(c.name)} {c.sql_type}" for c in self.columns
        )
        options = ",\n".join(
            f"    {key} {quote_literal(value)}" for key, value in self.options().items()
        )
        return (
            f"create foreign table if not exists {quote_ident(self.name)} (\n"
            f"{columns}\n"
            f")\n"
            f"  server {quote_ident(server_name)}\n"
            f"  options (\n"
            f"{options}\n"
            f"  )"
        )


@dataclass(frozen=True, slots=True)
class ImportScope:
    """
    Which tables to generate.

    Usage:
        ImportScope.all()
        ImportScope.limit_to(["users", "orders"])
        ImportScope.all_except(["audit_logs"])
    """

    list_type: ImportSchemaType = ImportSchemaType.ALL
    names: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def all(cls) -> ImportScope:
        return cls()

    @classmethod
    def limit_to(cls, names: list[str] | tuple[str, ...]) -> ImportScope:
        return cls(ImportSchemaType.LIMIT_TO, frozenset(names))

    @classmethod
    def all_except(cls, names: list[str] | tuple[str, ...]) -> ImportScope:
        return cls(ImportSchemaType.EXCEPT, frozenset(names))

    @classmethod
    def from_stmt(cls, stmt: ImportForeignSchemaStmt) -> ImportScope:
        return cls(stmt.list_type, frozenset(stmt.table_list))

    def includes(self, table_name: str) -> bool:
        if self.list_type is ImportSchemaType.LIMIT_TO:
            return table_name in self.names
        if self.list_type is ImportSchemaType.EXCEPT:
            return table_name not in self.names
        return True


# =============================================================================
# Generator
# =============================================================================


class TableGenerator:
    """
    Maps endpoints of one OpenAPI document to table definitions.

    Usage:
        generator = TableGenerator(spec)
        for table in generator.generate(ImportScope.all()):
            print(table.to_sql("my_api_server"))
    """

    def __init__(self, spec: OpenApiSpec):
        self._spec = spec
        self._resolver = SchemaResolver(spec)

    def generate(self, scope: ImportScope | None = None) -> list[TableDefinition]:
        """
        Generate one table per collection endpoint in scope.

        Endpoints are visited in path order; when two paths derive the
        same table name the first one wins.
        """
        scope = scope or ImportScope.all()
        tables: list[TableDefinition] = []
        seen: dict[str, str] = {}

        for endpoint in extract_endpoints(self._spec):
            name = endpoint.table_name
            if not scope.includes(name):
                continue
            if name in seen:
                logger.warning(
                    f"[table_generator] Skipping {endpoint.path}: table '{name}' "
                    f"already generated for {seen[name]}"
                )
                continue
            seen[name] = endpoint.path
            tables.append(self.table_for(endpoint))

        logger.info(f"[table_generator] Generated {len(tables)} tables")
        return tables

    def table_for(self, endpoint: EndpointInfo) -> TableDefinition:
        """Build the table definition of a single endpoint."""
        columns = self._columns(endpoint)
        names = {c.name for c in columns}

        return TableDefinition(
            name=endpoint.table_name,
            endpoint=endpoint.path,
            columns=(*columns, ColumnDefinition(ATTRS_COLUMN, TypeOid.JSON)),
            rowid_column="id" if "id" in names else None,
            insertable=endpoint.supports_post,
            updatable=endpoint.supports_patch,
            deletable=endpoint.supports_delete,
        )

    def _columns(self, endpoint: EndpointInfo) -> list[ColumnDefinition]:
        row_schema = None
        if endpoint.response_schema is not None:
            row_schema = self.row_schema(endpoint.response_schema)

        if row_schema is None:
            logger.warning(
                f"[table_generator] No object schema for {endpoint.path}, "
                f"generating '{ATTRS_COLUMN}' column only"
            )
            return []

        columns: list[ColumnDefinition] = []
        seen = {ATTRS_COLUMN}

        for prop_name, prop_schema in row_schema.properties.items():
            name = to_snake_case(prop_name)
            if not name or name in seen:
                continue
            seen.add(name)

            resolved = self._resolver.resolve(prop_schema)
            columns.append(
                ColumnDefinition(
                    name=name,
                    type_oid=type_oid_for_schema(resolved),
                    source=prop_name,
                )
            )

        return columns

    def row_schema(self, schema: Schema) -> Schema | None:
        """
        Find the object schema describing one row of a response.

        Returns:
            The row schema, or None when the response is not made of objects
        """
        resolved = self._resolver.resolve(schema)

        if resolved.schema_type == "array":
            return self._object_items(resolved)

        if not resolved.is_object:
            return None

        for key in DATA_KEYS:
            wrapped = resolved.properties.get(key)
            if wrapped is None:
                continue
            wrapped = self._resolver.resolve(wrapped)
            if wrapped.schema_type == "array":
                return self._object_items(wrapped)
            if wrapped.is_object:
                return wrapped

        return resolved

    def _object_items(self, array_schema: Schema) -> Schema | None:
        if array_schema.items is None:
            return None
        items = self._resolver.resolve(array_schema.items)
        return items if items.is_object else None


# =============================================================================
# Entry Points
# =============================================================================


def generate_tables(
    spec: OpenApiSpec,
    scope: ImportScope | None = None,
) -> list[TableDefinition]:
    """Generate table definitions for the endpoints of a document."""
    return TableGenerator(spec).generate(scope)


def generate_all_tables(
    spec: OpenApiSpec,
    server_name: str,
    scope: ImportScope | None = None,
) -> list[str]:
    """Generate one CREATE FOREIGN TABLE statement per endpoint in scope."""
    return [table.to_sql(server_name) for table in generate_tables(spec, scope)]


# =============================================================================
# SQL Helpers
# =============================================================================


def quote_ident(name: str) -> str:
    """Double-quote an identifier unless it is a plain, non-reserved lowercase name."""
    if _PLAIN_IDENTIFIER.fullmatch(name) and name not in _RESERVED_WORDS:
        return name
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _flag(value: bool) -> str:
    return "true" if value else "false"
