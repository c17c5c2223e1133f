"""
Default Clock: RFC 3339 <-> epoch microseconds using datetime.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from openapi_fdw.errors import CellConversionError

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class SystemClock:
    """
    Converts timestamps with microsecond precision.

    Strings without an offset are read as UTC. Output always carries an
    explicit +00:00 offset.
    """

    def parse_rfc3339(self, text: str) -> int:
        """
        Parse an RFC 3339 timestamp (or a plain date) to epoch microseconds.

        Raises:
            CellConversionError: If the text is not a valid timestamp
        """
        normalized = text.strip()
        if normalized[-1:] in ("Z", "z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError as e:
            raise CellConversionError(f"Invalid RFC 3339 timestamp '{text}': {e}") from e

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return (parsed - _EPOCH) // timedelta(microseconds=1)

    def to_rfc3339(self, micros: int) -> str:
        return (_EPOCH + timedelta(microseconds=micros)).isoformat()
