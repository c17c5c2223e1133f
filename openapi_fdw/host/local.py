"""
In-process host driver.

LocalHost plays the database's role: it builds contexts from plain
option dicts, drives the scan/modify/import callbacks in the order a
real host would, and hands back Python values. Useful for scripts,
examples and tests.

Usage:
    host = LocalHost({"base_url": "https://api.example.com"})
    for row in host.select(
        {"endpoint": "/users"},
        [Column("id", TypeOid.STRING), Column("name", TypeOid.STRING)],
    ):
        print(row["id"], row["name"])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from openapi_fdw.adapter.fdw import HostServices, OpenApiFdw
from openapi_fdw.spec.models import OpenApiSpec

from .clock import SystemClock
from .http import HttpxTransport
from .metrics import InMemoryMetrics
from .protocol import Clock, SecretStore, Transport
from .types import (
    Cell,
    Column,
    Context,
    ImportForeignSchemaStmt,
    ImportSchemaType,
    Qual,
    Row,
)

logger = logging.getLogger(__name__)


class LocalHost:
    """Drives one OpenApiFdw session from Python."""

    def __init__(
        self,
        server_options: dict[str, str],
        *,
        transport: Transport | None = None,
        secrets: SecretStore | None = None,
        clock: Clock | None = None,
        metrics: InMemoryMetrics | None = None,
        spec: OpenApiSpec | None = None,
    ):
        """
        Initialize the host and the FDW session.

        Args:
            server_options: Foreign server options (base_url, spec_url, ...)
            transport: HTTP transport (default: an owned HttpxTransport)
            secrets: Secret store for api_key_id / bearer_token_id
            clock: Time capability (default: SystemClock)
            metrics: Metrics sink (default: a new InMemoryMetrics)
            spec: Pre-parsed OpenAPI document
        """
        self._owned_transport = HttpxTransport() if transport is None else None
        self._server_options = dict(server_options)
        self.metrics = metrics if metrics is not None else InMemoryMetrics()

        services = HostServices(
            transport=transport or self._owned_transport,
            secrets=secrets,
            clock=clock or SystemClock(),
            metrics=self.metrics,
        )
        self.fdw = OpenApiFdw.init(self._context(), services, spec=spec)

    def _context(
        self,
        table_options: dict[str, str] | None = None,
        columns: Iterable[Column] = (),
        quals: Iterable[Qual] = (),
    ) -> Context:
        return Context(
            server_options=self._server_options,
            table_options=dict(table_options or {}),
            quals=list(quals),
            columns=list(columns),
        )

    def select(
        self,
        table_options: dict[str, str],
        columns: list[Column],
        quals: Iterable[Qual] = (),
    ) -> Iterator[dict[str, Any]]:
        """
        Scan a foreign table.

        Yields:
            One dict per row mapping column name to cell value (None if unset)
        """
        ctx = self._context(table_options, columns, quals)
        names = [column.name for column in columns]

        self.fdw.begin_scan(ctx)
        try:
            while True:
                row = Row(cols=list(names))
                if not self.fdw.iter_scan(ctx, row):
                    break
                yield {
                    name: cell.value if cell is not None else None
                    for name, cell in row.items()
                }
        finally:
            self.fdw.end_scan(ctx)

    def insert(self, table_options: dict[str, str], values: dict[str, Cell | None]) -> None:
        ctx = self._context(table_options)
        self.fdw.begin_modify(ctx)
        try:
            self.fdw.insert(ctx, Row(cols=list(values), cells=list(values.values())))
        finally:
            self.fdw.end_modify(ctx)

    def update(
        self,
        table_options: dict[str, str],
        rowid: Cell,
        values: dict[str, Cell | None],
    ) -> None:
        ctx = self._context(table_options)
        self.fdw.begin_modify(ctx)
        try:
            self.fdw.update(ctx, rowid, Row(cols=list(values), cells=list(values.values())))
        finally:
            self.fdw.end_modify(ctx)

    def delete(self, table_options: dict[str, str], rowid: Cell) -> None:
        ctx = self._context(table_options)
        self.fdw.begin_modify(ctx)
        try:
            self.fdw.delete(ctx, rowid)
        finally:
            self.fdw.end_modify(ctx)

    def import_schema(
        self,
        server_name: str,
        *,
        limit_to: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
    ) -> list[str]:
        """
        Run IMPORT FOREIGN SCHEMA and return the generated statements.

        Args:
            server_name: Foreign server named in the statements
            limit_to: Only these tables (LIMIT TO)
            exclude: All tables except these (EXCEPT)
        """
        if limit_to is not None and exclude is not None:
            raise ValueError("limit_to and exclude are mutually exclusive")

        if limit_to is not None:
            stmt = ImportForeignSchemaStmt(
                server_name=server_name,
                list_type=ImportSchemaType.LIMIT_TO,
                table_list=tuple(limit_to),
            )
        elif exclude is not None:
            stmt = ImportForeignSchemaStmt(
                server_name=server_name,
                list_type=ImportSchemaType.EXCEPT,
                table_list=tuple(exclude),
            )
        else:
            stmt = ImportForeignSchemaStmt(server_name=server_name)

        return self.fdw.import_foreign_schema(self._context(), stmt)

    def close(self) -> None:
        if self._owned_transport is not None:
            self._owned_transport.close()

    def __enter__(self) -> LocalHost:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
