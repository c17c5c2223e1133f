"""
Utilities shared by the spec loader and the adapter.
"""

from .json_parser import dump_json, loads_or_none, parse_document, parse_json
from .json_pointer import MISSING, resolve_pointer

__all__ = [
    "parse_json",
    "parse_document",
    "dump_json",
    "loads_or_none",
    "MISSING",
    "resolve_pointer",
]
