"""
Outbound request construction for scans and mutations.

URL shapes:
    {base_url}{endpoint}/{id}             row-id pushdown, update, delete
    {next_url}                            captured next-page link
    {base_url}{endpoint}?cursor&limit&... first page / cursor pages
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from openapi_fdw.errors import RowIdError
from openapi_fdw.host.types import Cell, Qual, TypeOid

from .state import ScanState

logger = logging.getLogger(__name__)

# Cell kinds that can be rendered as a query parameter
_PUSHDOWN_KINDS = (TypeOid.STRING, TypeOid.I32, TypeOid.I64, TypeOid.BOOL)

# Cell kinds accepted as a row identifier for update/delete
_ROWID_KINDS = (TypeOid.STRING, TypeOid.I32, TypeOid.I64)


def _encode(value: str) -> str:
    return quote(value, safe="")


def _query_value(cell: Cell) -> str | None:
    if cell.kind not in _PUSHDOWN_KINDS:
        return None
    if cell.kind is TypeOid.BOOL:
        return "true" if cell.value else "false"
    return str(cell.value)


def find_rowid_pushdown(quals: list[Qual], rowid_column: str) -> str | None:
    """
    Return the identifier of an `rowid = '<string>'` predicate, if any.

    The column name is compared case-insensitively; only string literals
    qualify for direct resource access.
    """
    rowid = rowid_column.lower()
    for qual in quals:
        if qual.field.lower() != rowid or qual.operator != "=":
            continue
        if isinstance(qual.value, Cell) and qual.value.kind is TypeOid.STRING:
            return qual.value.value
        return None
    return None


def resource_url(base_url: str, endpoint: str, resource_id: str) -> str:
    return f"{base_url}{endpoint}/{_encode(resource_id)}"


def build_url(state: ScanState, base_url: str, quals: list[Qual]) -> str:
    """
    Build the URL of the next request of a scan.

    Args:
        state: Scan configuration and pagination progress
        base_url: API base URL (no trailing '/')
        quals: Predicates of the current query

    Returns:
        Absolute URL
    """
    resource_id = find_rowid_pushdown(quals, state.rowid_column)
    if resource_id is not None:
        return resource_url(base_url, state.endpoint, resource_id)

    if state.next_url:
        return state.next_url

    params: list[tuple[str, str]] = []

    if state.next_cursor:
        params.append((state.cursor_param, state.next_cursor))

    if state.page_size > 0 and state.page_size_param:
        params.append((state.page_size_param, str(state.page_size)))

    rowid = state.rowid_column.lower()
    for qual in quals:
        if qual.field.lower() == rowid or qual.operator != "=":
            continue
        if not isinstance(qual.value, Cell):
            continue
        value = _query_value(qual.value)
        if value is not None:
            params.append((qual.field, value))

    url = f"{base_url}{state.endpoint}"
    if params:
        url += "?" + "&".join(f"{_encode(k)}={_encode(v)}" for k, v in params)
    return url


def rowid_to_string(rowid: Cell) -> str:
    """
    Render a row identifier for a resource URL.

    Raises:
        RowIdError: If the cell is not a string or 32/64-bit integer
    """
    if rowid.kind not in _ROWID_KINDS:
        raise RowIdError(
            f"Invalid rowid column value type: {rowid.kind.value} "
            f"(expected string, i32 or i64)"
        )
    return str(rowid.value)
