"""
Exceptions for the OpenAPI foreign data wrapper.

Every error raised to the host derives from FdwError so the host can
surface it as a single failure of the current callback. Nothing here is
retried internally; the host decides whether to re-run the operation.

Taxonomy:
    - TransportError: network failures and non-2xx HTTP statuses
    - ParseError: malformed JSON (SpecParseError for OpenAPI documents,
      CellConversionError for date/time strings)
    - ResponseShapeError: response payload has an unexpected shape
    - RowIdError: row-id cell of an unsupported type on mutation
    - ConfigurationError: missing or invalid options
    - OperationNotAllowedError: mutation the table does not allow
"""

from __future__ import annotations


class FdwError(Exception):
    """Base exception for all adapter errors."""


class TransportError(FdwError):
    """Raised when a request fails at the network level or with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    @classmethod
    def for_status(cls, status_code: int, body: str) -> "TransportError":
        """Build the error for an HTTP status, keeping the body as context."""
        return cls(
            f"HTTP status {status_code}: {body}",
            status_code=status_code,
            response_body=body,
        )


class ParseError(FdwError):
    """Raised when a payload cannot be parsed."""


class SpecParseError(ParseError):
    """Raised when an OpenAPI document fails structural parsing."""


class CellConversionError(ParseError):
    """Raised when a JSON value cannot be converted into its target cell."""


class ResponseShapeError(FdwError):
    """Raised when a response body does not contain rows where expected."""


class RowIdError(FdwError):
    """Raised when a row-id cell is not a string or 32/64-bit integer."""


class ConfigurationError(FdwError):
    """Raised when a required option is missing or invalid."""


class OperationNotAllowedError(FdwError):
    """Raised when a mutation is attempted against a table that disallows it."""

    def __init__(self, operation: str, endpoint: str):
        super().__init__(f"{operation} is not allowed on endpoint '{endpoint}'")
        self.operation = operation
        self.endpoint = endpoint
