"""
Custom Transport Example

This example demonstrates how to plug a custom transport into the FDW:
1. Implement the Transport protocol
2. Serve canned pages for a paginated endpoint
3. Drive a scan through LocalHost

Useful for testing and development without network access.

Run: python -m examples.02-custom-transport.main
"""

import json

from openapi_fdw import LocalHost
from openapi_fdw.host import Column, HttpRequest, HttpResponse, Transport, TypeOid

# =============================================================================
# Custom Transport: Canned Pages
# =============================================================================


PAGES = {
    "https://api.example.com/customers?limit=2": {
        "data": [
            {"id": "cus_1", "email": "ann@example.com", "createdAt": "2024-01-15T10:30:00Z"},
            {"id": "cus_2", "email": "bo@example.com", "createdAt": "2024-02-01T08:00:00Z"},
        ],
        "has_more": True,
        "next_cursor": "cus_2",
    },
    "https://api.example.com/customers?after=cus_2&limit=2": {
        "data": [
            {"id": "cus_3", "email": "cy@example.com", "createdAt": "2024-03-09T17:45:00Z"},
        ],
        "has_more": False,
    },
}


class CannedTransport:
    """
    A transport that answers from an in-memory URL map.

    Unknown URLs get a 404, which the FDW treats as an empty result.
    """

    def __init__(self, pages: dict[str, dict]):
        self._pages = pages
        self.log: list[str] = []

    def send(self, request: HttpRequest) -> HttpResponse:
        self.log.append(f"{request.method.value} {request.url}")
        page = self._pages.get(request.url)
        if page is None:
            return HttpResponse(status_code=404, body="not found")
        return HttpResponse(status_code=200, body=json.dumps(page))


# =============================================================================
# Main
# =============================================================================


def main():
    print("=" * 60)
    print("OpenAPI FDW: Custom Transport Example")
    print("=" * 60)

    transport = CannedTransport(PAGES)
    print(f"Implements Transport: {isinstance(transport, Transport)}")

    host = LocalHost(
        {"base_url": "https://api.example.com", "page_size": "2"},
        transport=transport,
    )

    columns = [
        Column("id", TypeOid.STRING),
        Column("email", TypeOid.STRING),
        Column("created_at", TypeOid.TIMESTAMPTZ),
    ]

    print()
    print("Customers:")
    for row in host.select({"endpoint": "/customers"}, columns):
        print(f"  {row['id']}: {row['email']} (created_at={row['created_at']})")

    print()
    print("Requests sent:")
    for line in transport.log:
        print(f"  {line}")

    print()
    print(f"Metrics: {host.metrics.snapshot()}")


if __name__ == "__main__":
    main()
