"""
JSON parsing utilities for API payloads and OpenAPI documents.

Handles:
- Strict parsing of response bodies (errors surface as ParseError)
- OpenAPI documents in JSON or YAML
- Compact serialization matching the wire form the API expects
"""
from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from openapi_fdw.errors import ParseError, SpecParseError

logger = logging.getLogger(__name__)


def parse_json(text: str, *, source: str = "response") -> Any:
    """
    Parse a JSON payload.

    Args:
        text: Raw payload text
        source: What is being parsed, used in the error message

    Returns:
        Parsed JSON value (any type)

    Raises:
        ParseError: If the payload is not valid JSON
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in {source}: {e}") from e


def parse_document(text: str) -> dict[str, Any]:
    """
    Parse an OpenAPI document.

    Tries in order:
    1. JSON
    2. YAML

    Raises:
        SpecParseError: If neither parser yields a mapping
    """
    try:
        doc = json.loads(text)
    except json.JSONDecodeError:
        try:
            doc = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SpecParseError(f"Failed to parse OpenAPI spec: {e}") from e
        logger.debug("OpenAPI document parsed as YAML")

    if not isinstance(doc, dict):
        raise SpecParseError(
            f"Failed to parse OpenAPI spec: expected a mapping, got {type(doc).__name__}"
        )
    return doc


def dump_json(value: Any) -> str:
    """Serialize to compact JSON text (no whitespace between tokens)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def loads_or_none(text: str) -> Any:
    """Parse JSON text, returning None when it is not valid JSON."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


__all__ = [
    "parse_json",
    "parse_document",
    "dump_json",
    "loads_or_none",
]
