"""
httpx-backed Transport.

Lifecycle:
    The transport owns one httpx.Client, created lazily on the first
    request and reused for connection pooling. Use it as a context
    manager or call close() when the session ends. A caller-provided
    client is used as-is and never closed here.

    with HttpxTransport(timeout=30.0) as transport:
        fdw = OpenApiFdw.init(ctx, HostServices(transport=transport))
"""

from __future__ import annotations

import logging

import httpx

from openapi_fdw.errors import TransportError

from .protocol import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class HttpxTransport:
    """Synchronous Transport implementation using httpx."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        log_responses: bool = False,
    ):
        """
        Initialize the transport.

        Args:
            timeout: Request timeout in seconds for the owned client
            http_client: Optional shared client (caller manages lifecycle)
            log_responses: Log status and a body excerpt at debug level
        """
        self._timeout = timeout
        self._shared_client = http_client
        self._owned_client: httpx.Client | None = None
        self._log_responses = log_responses

    def _get_client(self) -> httpx.Client:
        if self._shared_client is not None:
            return self._shared_client
        if self._owned_client is None or self._owned_client.is_closed:
            self._owned_client = httpx.Client(timeout=self._timeout)
        return self._owned_client

    def send(self, request: HttpRequest) -> HttpResponse:
        """
        Execute a request.

        Returns:
            HttpResponse for any status the server returned

        Raises:
            TransportError: On timeouts and network errors
        """
        client = self._get_client()
        method = request.method.value

        try:
            response = client.request(
                method=method,
                url=request.url,
                headers=list(request.headers),
                content=request.body.encode("utf-8") if request.body else None,
            )
        except httpx.TimeoutException as e:
            logger.error(f"[httpx_transport] Timeout: {method} {request.url}")
            raise TransportError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"[httpx_transport] Request failed: {method} {request.url}: {e}")
            raise TransportError(f"Request failed: {e}") from e

        if self._log_responses:
            logger.debug(
                f"[httpx_transport] Response: status={response.status_code} "
                f"body={response.text[:500] if response.text else 'empty'}"
            )

        return HttpResponse(
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the owned client (never the shared one)."""
        if self._owned_client is not None and not self._owned_client.is_closed:
            self._owned_client.close()
        self._owned_client = None

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
