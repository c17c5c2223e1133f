"""
Configuration for the OpenAPI FDW.
"""

from .schemas import (
    DEFAULT_CURSOR_PARAM,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PAGE_SIZE_PARAM,
    ModifyTableOptions,
    ScanTableOptions,
    ServerOptions,
    load_options,
)

__all__ = [
    "ServerOptions",
    "ScanTableOptions",
    "ModifyTableOptions",
    "load_options",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE_PARAM",
    "DEFAULT_CURSOR_PARAM",
]
