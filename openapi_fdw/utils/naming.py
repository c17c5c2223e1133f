"""
Column-name normalization between JSON keys and relational columns.

Generated columns are snake_case; API payloads are often camelCase.
The cell mapper turns a column name back into camelCase, or
snake-cases each row key, when looking up a value.
"""
from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^0-9A-Za-z_]+")
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_UNDERSCORES = re.compile(r"_{2,}")


def to_camel_case(name: str) -> str:
    """
    Convert snake_case to camelCase.

    Examples:
        user_name -> userName
        created_at_utc -> createdAtUtc
        id -> id
    """
    result = []
    capitalize_next = False
    for char in name:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char)
    return "".join(result)


def to_snake_case(name: str) -> str:
    """
    Convert a JSON key to a snake_case column name.

    Examples:
        userName -> user_name
        HTTPStatus -> http_status
        first-name -> first_name
        _links -> _links
    """
    text = _NON_WORD.sub("_", name)
    text = _ACRONYM.sub(r"\1_\2", text)
    text = _LOWER_UPPER.sub(r"\1_\2", text)
    text = _UNDERSCORES.sub("_", text)
    return text.lower().rstrip("_")


__all__ = ["to_camel_case", "to_snake_case"]
