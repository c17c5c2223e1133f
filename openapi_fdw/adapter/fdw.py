"""
OpenAPI Foreign Data Wrapper session.

An OpenApiFdw is created by the host's init callback and handed back
to every later callback of the same connection. It owns the server-level
configuration and the state of the scan or modify currently in progress;
the host serializes callbacks, so no locking is needed.

Lifecycle:
    fdw = OpenApiFdw.init(ctx, services)

    # Scan
    fdw.begin_scan(ctx)            # first page fetched
    while fdw.iter_scan(ctx, row): # pages fetched on demand
        ...
    fdw.re_scan(ctx)               # optional: restart from the first page
    fdw.end_scan(ctx)

    # Modify
    fdw.begin_modify(ctx)
    fdw.insert(ctx, row)           # POST   {base}{endpoint}
    fdw.update(ctx, rowid, row)    # PATCH  {base}{endpoint}/{id}
    fdw.delete(ctx, rowid)         # DELETE {base}{endpoint}/{id}
    fdw.end_modify(ctx)

    # Schema import
    statements = fdw.import_foreign_schema(ctx, stmt)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import SecretStr

from openapi_fdw.config.schemas import (
    ModifyTableOptions,
    ScanTableOptions,
    ServerOptions,
    load_options,
)
from openapi_fdw.errors import (
    ConfigurationError,
    FdwError,
    OperationNotAllowedError,
    TransportError,
)
from openapi_fdw.host.clock import SystemClock
from openapi_fdw.host.metrics import NullMetrics
from openapi_fdw.host.protocol import (
    Clock,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    Metric,
    Metrics,
    SecretStore,
    Transport,
    error_for_status,
)
from openapi_fdw.host.types import (
    Cell,
    HostContext,
    ImportForeignSchemaStmt,
    OptionsType,
    Row,
)
from openapi_fdw.spec.models import OpenApiSpec
from openapi_fdw.tables.generator import ImportScope, generate_all_tables
from openapi_fdw.utils import MISSING, parse_json, resolve_pointer

from .cells import json_to_cell, row_to_body
from .heuristics import NO_NEXT_PAGE, extract_data, next_page
from .request import build_url, find_rowid_pushdown, resource_url, rowid_to_string
from .state import ScanPhase, ScanState

logger = logging.getLogger(__name__)

FDW_NAME = "OpenApiFdw"
USER_AGENT = "openapi-fdw"


@dataclass
class HostServices:
    """
    Capabilities the host provides to the adapter.

    Attributes:
        transport: Sends HTTP requests
        secrets: Resolves api_key_id / bearer_token_id (optional)
        clock: RFC 3339 conversions
        metrics: Usage counters
    """

    transport: Transport
    secrets: SecretStore | None = None
    clock: Clock = field(default_factory=SystemClock)
    metrics: Metrics = field(default_factory=NullMetrics)


def build_headers(
    options: ServerOptions,
    secrets: SecretStore | None = None,
) -> tuple[tuple[str, str], ...]:
    """
    Build the headers sent with every request.

    Authentication:
        - api_key (or api_key_id) under api_key_header. The value is
          "<prefix> <key>" when a prefix is set, "Bearer <key>" for the
          Authorization header without prefix, the bare key otherwise.
        - bearer_token (or bearer_token_id) as "Authorization: Bearer <token>".
    """
    headers = [
        ("user-agent", USER_AGENT),
        ("content-type", "application/json"),
        ("accept", "application/json"),
    ]

    api_key = _credential(options.api_key, options.api_key_id, secrets, "api_key_id")
    if api_key is not None:
        header_name = options.api_key_header
        if options.api_key_prefix:
            value = f"{options.api_key_prefix} {api_key}"
        elif header_name == "Authorization":
            value = f"Bearer {api_key}"
        else:
            value = api_key
        headers.append((header_name.lower(), value))

    token = _credential(options.bearer_token, options.bearer_token_id, secrets, "bearer_token_id")
    if token is not None:
        headers.append(("authorization", f"Bearer {token}"))

    return tuple(headers)


def _credential(
    literal: SecretStr | None,
    secret_id: str | None,
    secrets: SecretStore | None,
    option: str,
) -> str | None:
    if literal is not None:
        return literal.get_secret_value()
    if secret_id is None:
        return None
    if secrets is None:
        raise ConfigurationError(f"Option '{option}' is set but no secret store is available")
    value = secrets.get_secret(secret_id)
    if value is None:
        logger.warning(f"[openapi_fdw] Secret '{secret_id}' referenced by '{option}' not found")
    return value


class OpenApiFdw:
    """
    Session state for one foreign server connection.

    Created by init(); never shared between connections.
    """

    def __init__(
        self,
        options: ServerOptions,
        services: HostServices,
        *,
        spec: OpenApiSpec | None = None,
    ):
        self._options = options
        self._services = services
        self._headers = build_headers(options, services.secrets)
        self._base_url = options.base_url
        self._spec = spec
        self._scan: ScanState | None = None
        self._modify: ModifyTableOptions | None = None

        if not self._base_url and spec is not None and spec.base_url():
            self._base_url = spec.base_url().rstrip("/")

    @classmethod
    def init(
        cls,
        ctx: HostContext,
        services: HostServices,
        *,
        spec: OpenApiSpec | None = None,
    ) -> OpenApiFdw:
        """
        Create a session from the server options of the host context.

        Args:
            ctx: Host context (server options are read)
            services: Host capabilities
            spec: Optional pre-parsed OpenAPI document

        Raises:
            ConfigurationError: If server options are invalid
        """
        options = load_options(ServerOptions, ctx.get_options(OptionsType.SERVER))
        fdw = cls(options, services, spec=spec)
        fdw._record(Metric.CREATE_TIMES, 1)
        logger.info(
            f"[openapi_fdw] Initialized (base_url={fdw.base_url or '<from spec>'}, "
            f"spec_url={options.spec_url or '<none>'})"
        )
        return fdw

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return self._headers

    @property
    def spec(self) -> OpenApiSpec | None:
        return self._spec

    @property
    def scan_state(self) -> ScanState | None:
        return self._scan

    # =========================================================================
    # Scan
    # =========================================================================

    def begin_scan(self, ctx: HostContext) -> None:
        """Read table options, reset pagination and fetch the first page."""
        table = load_options(ScanTableOptions, ctx.get_options(OptionsType.TABLE))
        self._require_base_url()

        self._scan = ScanState.from_options(self._options, table)
        logger.info(f"[openapi_fdw] Begin scan of {self._scan.endpoint}")
        self._make_request(ctx, self._scan)

    def iter_scan(self, ctx: HostContext, row: Row) -> bool:
        """
        Fill `row` with the next result row.

        Returns:
            True if a row was produced, False at end of data
        """
        state = self._require_scan()
        if state.phase is ScanPhase.DONE:
            return False

        if state.exhausted:
            self._record(Metric.ROWS_IN, len(state.rows))
            self._record(Metric.ROWS_OUT, len(state.rows))

            if not state.has_next_page:
                state.phase = ScanPhase.DONE
                return False

            self._make_request(ctx, state)
            if not state.rows:
                state.phase = ScanPhase.DONE
                return False

        src_row = state.rows[state.index]
        if state.object_path:
            projected = resolve_pointer(src_row, state.object_path)
            if projected is not MISSING:
                src_row = projected

        clock = self._services.clock
        for column in ctx.get_columns():
            row.push(json_to_cell(src_row, column, clock))

        state.index += 1
        return True

    def re_scan(self, ctx: HostContext) -> None:
        """Restart the current scan from the first page."""
        state = self._require_scan()
        state.reset_pagination()
        self._make_request(ctx, state)

    def end_scan(self, ctx: HostContext) -> None:
        if self._scan is not None:
            self._scan.clear()

    def _make_request(self, ctx: HostContext, state: ScanState) -> None:
        """Fetch one page and load it into the scan state."""
        quals = ctx.get_quals()
        url = build_url(state, self._base_url, quals)
        logger.debug(f"[openapi_fdw] GET {url}")

        response = self._send(HttpMethod.GET, url)

        if response.status_code == 404:
            logger.debug(f"[openapi_fdw] 404 for {url}, treating as no rows")
            state.load_page([], NO_NEXT_PAGE)
            return

        error_for_status(response)
        self._record(Metric.BYTES_IN, len(response.body.encode("utf-8")))

        body = parse_json(response.body)
        rows = extract_data(body, state.response_path)

        # A single-resource lookup has no continuation
        if find_rowid_pushdown(quals, state.rowid_column) is not None:
            link = NO_NEXT_PAGE
        else:
            link = next_page(body, state.cursor_path)

        state.load_page(rows, link)
        logger.info(
            f"[openapi_fdw] Fetched {len(rows)} rows from {state.endpoint} "
            f"(more={'yes' if link.has_next else 'no'})"
        )

    def _require_scan(self) -> ScanState:
        if self._scan is None:
            raise FdwError("No scan in progress; begin_scan must be called first")
        return self._scan

    # =========================================================================
    # Modify
    # =========================================================================

    def begin_modify(self, ctx: HostContext) -> None:
        """Read the table options needed by insert/update/delete."""
        self._modify = load_options(ModifyTableOptions, ctx.get_options(OptionsType.TABLE))
        self._require_base_url()
        logger.info(f"[openapi_fdw] Begin modify of {self._modify.endpoint}")

    def insert(self, ctx: HostContext, row: Row) -> None:
        """POST the row to the collection endpoint."""
        table = self._require_modify()
        if not table.insertable:
            raise OperationNotAllowedError("INSERT", table.endpoint)

        url = f"{self._base_url}{table.endpoint}"
        body = row_to_body(row, self._services.clock)
        response = self._send(HttpMethod.POST, url, body)
        error_for_status(response)
        self._record(Metric.ROWS_OUT, 1)

    def update(self, ctx: HostContext, rowid: Cell, row: Row) -> None:
        """PATCH the resource identified by rowid with the row's cells."""
        table = self._require_modify()
        if not table.updatable:
            raise OperationNotAllowedError("UPDATE", table.endpoint)

        resource_id = rowid_to_string(rowid)
        url = resource_url(self._base_url, table.endpoint, resource_id)
        body = row_to_body(row, self._services.clock)
        response = self._send(HttpMethod.PATCH, url, body)
        error_for_status(response)
        self._record(Metric.ROWS_OUT, 1)

    def delete(self, ctx: HostContext, rowid: Cell) -> None:
        """DELETE the resource identified by rowid."""
        table = self._require_modify()
        if not table.deletable:
            raise OperationNotAllowedError("DELETE", table.endpoint)

        resource_id = rowid_to_string(rowid)
        url = resource_url(self._base_url, table.endpoint, resource_id)
        response = self._send(HttpMethod.DELETE, url)
        error_for_status(response)
        self._record(Metric.ROWS_OUT, 1)

    def end_modify(self, ctx: HostContext) -> None:
        self._modify = None

    def _require_modify(self) -> ModifyTableOptions:
        if self._modify is None:
            raise FdwError("No modify in progress; begin_modify must be called first")
        return self._modify

    # =========================================================================
    # Schema Import
    # =========================================================================

    def import_foreign_schema(
        self,
        ctx: HostContext,
        stmt: ImportForeignSchemaStmt,
    ) -> list[str]:
        """
        Generate CREATE FOREIGN TABLE statements for the API's endpoints.

        Raises:
            ConfigurationError: If no spec was given and spec_url is not set
        """
        if self._spec is None:
            self.fetch_spec()

        if self._spec is None:
            raise ConfigurationError("No OpenAPI spec available. Set spec_url in server options.")

        return generate_all_tables(self._spec, stmt.server_name, ImportScope.from_stmt(stmt))

    def fetch_spec(self) -> OpenApiSpec | None:
        """
        Fetch and parse the document at spec_url.

        Fills in base_url from the document's first server when no
        base_url option was given.

        Returns:
            The parsed spec, or None when spec_url is not configured
        """
        spec_url = self._options.spec_url
        if not spec_url:
            return None

        response = self._send(HttpMethod.GET, spec_url)
        if not response.is_success:
            raise TransportError(
                f"Failed to fetch OpenAPI spec: HTTP status {response.status_code}: {response.body}",
                status_code=response.status_code,
                response_body=response.body,
            )
        self._record(Metric.BYTES_IN, len(response.body.encode("utf-8")))

        self._spec = OpenApiSpec.from_str(response.body)

        if not self._base_url and self._spec.base_url():
            self._base_url = self._spec.base_url().rstrip("/")
            logger.info(f"[openapi_fdw] Using base_url from spec: {self._base_url}")

        return self._spec

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_base_url(self) -> None:
        if not self._base_url and self._spec is None and self._options.spec_url:
            self.fetch_spec()
        if not self._base_url:
            raise ConfigurationError(
                "base_url is required (set it in server options or use a spec with servers)"
            )

    def _send(self, method: HttpMethod, url: str, body: str = "") -> HttpResponse:
        request = HttpRequest(method=method, url=url, headers=self._headers, body=body)
        return self._services.transport.send(request)

    def _record(self, metric: Metric, value: int) -> None:
        try:
            self._services.metrics.inc(FDW_NAME, metric, value)
        except Exception as e:
            logger.warning(f"[openapi_fdw] Failed to record {metric.value}: {e}")
