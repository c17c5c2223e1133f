"""
Runtime adapter: response heuristics, cell conversion, request building
and scan state.

The OpenApiFdw session is in openapi_fdw.adapter.fdw.
"""

from .cells import (
    ATTRS_COLUMN,
    cell_to_json,
    json_to_cell,
    lookup_value,
    row_to_body,
    row_to_dict,
)
from .heuristics import (
    DATA_KEYS,
    NO_NEXT_PAGE,
    PageLink,
    extract_data,
    next_page,
)
from .request import (
    build_url,
    find_rowid_pushdown,
    resource_url,
    rowid_to_string,
)
from .state import ScanPhase, ScanState

__all__ = [
    # Cells
    "ATTRS_COLUMN",
    "lookup_value",
    "json_to_cell",
    "cell_to_json",
    "row_to_dict",
    "row_to_body",
    # Heuristics
    "DATA_KEYS",
    "PageLink",
    "NO_NEXT_PAGE",
    "extract_data",
    "next_page",
    # Requests
    "build_url",
    "find_rowid_pushdown",
    "resource_url",
    "rowid_to_string",
    # State
    "ScanPhase",
    "ScanState",
]
