"""
Relational types exchanged with the host.

The host owns the database side: it describes the target columns, hands
over filter predicates (quals), receives rows during scans and supplies
rows for mutations. These types are the adapter's view of that contract.

Cells form a closed set of kinds (TypeOid). Code that converts cells
dispatches on the kind through tables that must cover every member.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class TypeOid(str, Enum):
    """Kinds of relational cells."""

    BOOL = "bool"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"
    NUMERIC = "numeric"
    STRING = "string"
    DATE = "date"
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    JSON = "json"
    UUID = "uuid"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Cell:
    """
    A typed relational value.

    Value representation by kind:
        BOOL: bool
        I8 / I16 / I32 / I64: int
        F32 / F64: float
        NUMERIC: decimal.Decimal
        STRING / UUID / OTHER: str
        DATE: epoch seconds at a day boundary (int)
        TIMESTAMP / TIMESTAMPTZ: epoch microseconds (int)
        JSON: JSON text (str)
    """

    kind: TypeOid
    value: Any

    @classmethod
    def string(cls, value: str) -> Cell:
        return cls(TypeOid.STRING, value)

    @classmethod
    def i64(cls, value: int) -> Cell:
        return cls(TypeOid.I64, value)

    @classmethod
    def json(cls, text: str) -> Cell:
        return cls(TypeOid.JSON, text)


@dataclass(frozen=True, slots=True)
class Column:
    """A target column: name plus cell kind."""

    name: str
    type_oid: TypeOid


@dataclass(frozen=True, slots=True)
class Qual:
    """
    A filter predicate pushed down by the host.

    Attributes:
        field: Column name
        operator: Comparison operator ("=", "<", "~~", ...)
        value: A single cell, or a list of cells for IN / ANY predicates
    """

    field: str
    operator: str
    value: Cell | list[Cell]


@dataclass
class Row:
    """
    A row being built (scan) or read (mutation).

    During a scan the host creates an empty row for the target columns and
    the adapter pushes one cell per column, in column order. For
    mutations the host supplies both column names and cells.
    """

    cols: list[str] = field(default_factory=list)
    cells: list[Cell | None] = field(default_factory=list)

    def push(self, cell: Cell | None) -> None:
        self.cells.append(cell)

    def clear(self) -> None:
        self.cells.clear()

    def items(self) -> list[tuple[str, Cell | None]]:
        return list(zip(self.cols, self.cells))

    def as_dict(self) -> dict[str, Cell | None]:
        return dict(self.items())


class OptionsType(str, Enum):
    """Where an option was declared."""

    SERVER = "server"
    TABLE = "table"


@runtime_checkable
class HostContext(Protocol):
    """
    Per-callback context supplied by the host.

    Implementations expose the options declared on the server and the
    foreign table, the predicates of the current query and the target
    columns of the current scan.
    """

    def get_options(self, options_type: OptionsType) -> dict[str, str]:
        ...

    def get_quals(self) -> list[Qual]:
        ...

    def get_columns(self) -> list[Column]:
        ...


@dataclass
class Context:
    """In-process HostContext backed by plain values."""

    server_options: dict[str, str] = field(default_factory=dict)
    table_options: dict[str, str] = field(default_factory=dict)
    quals: list[Qual] = field(default_factory=list)
    columns: list[Column] = field(default_factory=list)

    def get_options(self, options_type: OptionsType) -> dict[str, str]:
        if options_type is OptionsType.SERVER:
            return dict(self.server_options)
        return dict(self.table_options)

    def get_quals(self) -> list[Qual]:
        return list(self.quals)

    def get_columns(self) -> list[Column]:
        return list(self.columns)


class ImportSchemaType(str, Enum):
    """Table filter of an IMPORT FOREIGN SCHEMA statement."""

    ALL = "all"
    LIMIT_TO = "limit_to"
    EXCEPT = "except"


@dataclass(frozen=True, slots=True)
class ImportForeignSchemaStmt:
    """The parts of IMPORT FOREIGN SCHEMA the adapter reads."""

    server_name: str
    remote_schema: str = ""
    local_schema: str = ""
    list_type: ImportSchemaType = ImportSchemaType.ALL
    table_list: tuple[str, ...] = ()
