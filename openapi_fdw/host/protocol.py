"""
Collaborator protocols supplied by the host.

The adapter never performs I/O, secret lookup, time conversion or metric
recording on its own. It calls these interfaces, so a database host can
plug in its own implementations and tests can plug in fakes. Default
implementations live next to this module (http, secrets, clock, metrics).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

from openapi_fdw.errors import TransportError


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """
    An outbound request.

    Attributes:
        method: HTTP verb
        url: Absolute URL including any query string
        headers: Header name/value pairs, sent in order
        body: Request body text (empty for GET/DELETE)
    """

    method: HttpMethod
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: str = ""


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status_code: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def error_for_status(response: HttpResponse) -> None:
    """
    Raise for non-2xx responses.

    Raises:
        TransportError: Carrying the status code and response body
    """
    if not response.is_success:
        raise TransportError.for_status(response.status_code, response.body)


@runtime_checkable
class Transport(Protocol):
    """
    Synchronous HTTP transport.

    send() returns any response the server produced, including error
    statuses; status handling is the caller's job. Network-level failures
    raise TransportError.
    """

    def send(self, request: HttpRequest) -> HttpResponse:
        ...


@runtime_checkable
class SecretStore(Protocol):
    """Looks up credentials configured by reference (api_key_id, bearer_token_id)."""

    def get_secret(self, secret_id: str) -> str | None:
        ...


@runtime_checkable
class Clock(Protocol):
    """RFC 3339 text <-> epoch microseconds."""

    def parse_rfc3339(self, text: str) -> int:
        ...

    def to_rfc3339(self, micros: int) -> str:
        ...


class Metric(str, Enum):
    CREATE_TIMES = "create_times"
    BYTES_IN = "bytes_in"
    ROWS_IN = "rows_in"
    ROWS_OUT = "rows_out"


@runtime_checkable
class Metrics(Protocol):
    """Monotonic usage counters. Recording must never fail the operation."""

    def inc(self, fdw_name: str, metric: Metric, value: int) -> None:
        ...
