"""
Row-location and pagination heuristics.

Both heuristics are ordered rule tables: each rule inspects the parsed
response body and either produces a result or passes. The first rule
that produces a result wins. Keeping them as data makes the precedence
explicit and lets each rule be tested on its own.

Row extraction (extract_data):
    1. configured response_path
    2. body is an array
    3. body object has one of DATA_KEYS
    4. body object is the row
    (anything else is an error)

Pagination (next_page):
    1. configured cursor_path
    2. next-page URL at a well-known location
    3. has_more flag plus a cursor at a well-known location
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from openapi_fdw.errors import ResponseShapeError
from openapi_fdw.utils import MISSING, resolve_pointer

logger = logging.getLogger(__name__)

# Keys probed, in order, for the row collection inside a wrapper object
DATA_KEYS = ("data", "results", "items", "records", "entries", "features")

NEXT_URL_PATHS = (
    "/meta/pagination/next",
    "/pagination/next",
    "/links/next",
    "/next",
    "/_links/next/href",
)

HAS_MORE_PATHS = (
    "/meta/pagination/has_more",
    "/has_more",
    "/pagination/has_more",
)

NEXT_CURSOR_PATHS = (
    "/meta/pagination/next_cursor",
    "/pagination/next_cursor",
    "/next_cursor",
    "/cursor",
)

_NO_MATCH = None


# =============================================================================
# Row Extraction
# =============================================================================


def _as_rows(value: Any) -> list[Any] | None:
    """An array is the rows; an object is a single row."""
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return [value]
    return None


def _rows_at_response_path(body: Any, response_path: str | None) -> list[Any] | None:
    if response_path is None:
        return _NO_MATCH

    data = resolve_pointer(body, response_path)
    if data is MISSING:
        raise ResponseShapeError(f"Response path '{response_path}' not found in response")

    rows = _as_rows(data)
    if rows is None:
        raise ResponseShapeError("Response data is not an array or object")
    return rows


def _rows_from_array_body(body: Any, response_path: str | None) -> list[Any] | None:
    if isinstance(body, list):
        return list(body)
    return _NO_MATCH


def _rows_under_data_key(body: Any, response_path: str | None) -> list[Any] | None:
    if not isinstance(body, dict):
        return _NO_MATCH
    for key in DATA_KEYS:
        if key in body:
            rows = _as_rows(body[key])
            if rows is not None:
                logger.debug(f"[heuristics] Rows found under '{key}'")
                return rows
    return _NO_MATCH


def _body_as_single_row(body: Any, response_path: str | None) -> list[Any] | None:
    if isinstance(body, dict):
        return [body]
    return _NO_MATCH


DataRule = Callable[[Any, str | None], list[Any] | None]

DATA_RULES: tuple[DataRule, ...] = (
    _rows_at_response_path,
    _rows_from_array_body,
    _rows_under_data_key,
    _body_as_single_row,
)


def extract_data(body: Any, response_path: str | None = None) -> list[Any]:
    """
    Extract the row sequence from a parsed response body.

    Args:
        body: Parsed JSON response
        response_path: Optional JSON Pointer to the rows

    Returns:
        Rows in response order

    Raises:
        ResponseShapeError: If no rule can locate rows
    """
    for rule in DATA_RULES:
        rows = rule(body, response_path)
        if rows is not None:
            return rows
    raise ResponseShapeError("Unable to extract data from response")


# =============================================================================
# Pagination
# =============================================================================


@dataclass(frozen=True, slots=True)
class PageLink:
    """
    Continuation found in a response. At most one field is set.

    Attributes:
        next_cursor: Opaque token to send as the cursor parameter
        next_url: Absolute URL of the next page, used verbatim
    """

    next_cursor: str | None = None
    next_url: str | None = None

    @property
    def has_next(self) -> bool:
        return self.next_cursor is not None or self.next_url is not None


NO_NEXT_PAGE = PageLink()


def _non_empty_string(body: Any, pointer: str) -> str | None:
    value = resolve_pointer(body, pointer)
    if isinstance(value, str) and value:
        return value
    return None


def _cursor_at_cursor_path(body: Any, cursor_path: str) -> PageLink | None:
    if not cursor_path:
        return _NO_MATCH
    cursor = _non_empty_string(body, cursor_path)
    return PageLink(next_cursor=cursor) if cursor else _NO_MATCH


def _next_url_link(body: Any, cursor_path: str) -> PageLink | None:
    if not isinstance(body, dict):
        return _NO_MATCH
    for path in NEXT_URL_PATHS:
        url = _non_empty_string(body, path)
        if url:
            logger.debug(f"[heuristics] Next page URL found at {path}")
            return PageLink(next_url=url)
    return _NO_MATCH


def _has_more_cursor(body: Any, cursor_path: str) -> PageLink | None:
    if not isinstance(body, dict):
        return _NO_MATCH

    has_more = False
    for path in HAS_MORE_PATHS:
        value = resolve_pointer(body, path)
        if value is not MISSING:
            has_more = value is True
            break

    if not has_more:
        return _NO_MATCH

    for path in NEXT_CURSOR_PATHS:
        cursor = _non_empty_string(body, path)
        if cursor:
            logger.debug(f"[heuristics] Next cursor found at {path}")
            return PageLink(next_cursor=cursor)
    return _NO_MATCH


PageRule = Callable[[Any, str], PageLink | None]

PAGINATION_RULES: tuple[PageRule, ...] = (
    _cursor_at_cursor_path,
    _next_url_link,
    _has_more_cursor,
)


def next_page(body: Any, cursor_path: str = "") -> PageLink:
    """
    Find the continuation of a paginated response.

    Args:
        body: Parsed JSON response
        cursor_path: Optional JSON Pointer to the next cursor

    Returns:
        PageLink with the cursor or URL of the next page, or NO_NEXT_PAGE
    """
    for rule in PAGINATION_RULES:
        link = rule(body, cursor_path)
        if link is not None:
            return link
    return NO_NEXT_PAGE
