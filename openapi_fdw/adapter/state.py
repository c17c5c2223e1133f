"""
Per-scan state.

A ScanState is created at begin-scan from the table options (with server
defaults filled in), advanced by every page fetch and discarded at
end-scan. next_cursor and next_url are mutually exclusive: a response
yields at most one continuation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from openapi_fdw.config.schemas import ScanTableOptions, ServerOptions

from .heuristics import PageLink


class ScanPhase(str, Enum):
    IDLE = "idle"
    READY = "ready"
    DONE = "done"


@dataclass
class ScanState:
    """
    Configuration and progress of one scan.

    Attributes:
        endpoint: Collection path (e.g. /users)
        rowid_column: Column used for row-id pushdown
        response_path: JSON Pointer to the rows, if configured
        object_path: JSON Pointer applied to each row, if configured
        cursor_path: JSON Pointer to the next cursor ("" = heuristics only)
        cursor_param: Query parameter carrying the cursor
        page_size: Requested page size (0 = do not send)
        page_size_param: Query parameter carrying the page size
        next_cursor: Cursor for the next page
        next_url: URL of the next page
        rows: Buffered rows of the current page
        index: Read position in rows
    """

    endpoint: str
    rowid_column: str = "id"
    response_path: str | None = None
    object_path: str | None = None
    cursor_path: str = ""
    cursor_param: str = "after"
    page_size: int = 0
    page_size_param: str = ""

    next_cursor: str | None = None
    next_url: str | None = None
    rows: list[Any] = field(default_factory=list)
    index: int = 0
    phase: ScanPhase = ScanPhase.IDLE

    @classmethod
    def from_options(cls, server: ServerOptions, table: ScanTableOptions) -> ScanState:
        """Table options win over server defaults."""
        return cls(
            endpoint=table.endpoint,
            rowid_column=table.rowid_column,
            response_path=table.response_path,
            object_path=table.object_path,
            cursor_path=table.cursor_path,
            cursor_param=table.cursor_param or server.cursor_param,
            page_size=table.page_size if table.page_size is not None else server.page_size,
            page_size_param=table.page_size_param or server.page_size_param,
        )

    @property
    def has_next_page(self) -> bool:
        return self.next_cursor is not None or self.next_url is not None

    @property
    def exhausted(self) -> bool:
        """All buffered rows have been read."""
        return self.index >= len(self.rows)

    def reset_pagination(self) -> None:
        self.next_cursor = None
        self.next_url = None

    def load_page(self, rows: list[Any], link: PageLink) -> None:
        self.rows = rows
        self.index = 0
        self.next_cursor = link.next_cursor
        self.next_url = link.next_url
        self.phase = ScanPhase.READY

    def clear(self) -> None:
        self.rows = []
        self.index = 0
        self.phase = ScanPhase.DONE
