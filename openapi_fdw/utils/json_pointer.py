"""
RFC 6901 JSON Pointer lookup.

A pointer is either "" (the whole document) or a sequence of
"/"-prefixed reference tokens, with "~1" standing for "/" and "~0"
for "~". A JSON null that is found is a value; a path that does not
resolve yields MISSING.
"""
from __future__ import annotations

from typing import Any, Final


class _Missing:
    """Sentinel type for pointers that do not resolve."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


def _unescape(token: str) -> str:
    # Order matters: "~01" must decode to "~1", not "/"
    return token.replace("~1", "/").replace("~0", "~")


def resolve_pointer(doc: Any, pointer: str) -> Any:
    """
    Resolve a JSON Pointer against a parsed JSON document.

    Args:
        doc: Parsed JSON value
        pointer: JSON Pointer string (e.g. "/meta/pagination/next")

    Returns:
        The addressed value, or MISSING if the path does not resolve
    """
    if pointer == "":
        return doc
    if not pointer.startswith("/"):
        return MISSING

    current = doc
    for raw in pointer.split("/")[1:]:
        token = _unescape(raw)
        if isinstance(current, dict):
            if token not in current:
                return MISSING
            current = current[token]
        elif isinstance(current, list):
            is_index = token.isascii() and token.isdigit()
            if not is_index or (len(token) > 1 and token.startswith("0")):
                return MISSING
            index = int(token)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


__all__ = ["MISSING", "resolve_pointer"]
