"""
Pytest configuration and fixtures for OpenAPI FDW tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from openapi_fdw.spec import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from openapi_fdw.adapter.fdw import HostServices, OpenApiFdw  # noqa: E402
from openapi_fdw.host.metrics import InMemoryMetrics  # noqa: E402
from openapi_fdw.host.protocol import HttpMethod, HttpRequest, HttpResponse  # noqa: E402
from openapi_fdw.host.secrets import MappingSecretStore  # noqa: E402
from openapi_fdw.host.types import Context  # noqa: E402
from openapi_fdw.spec.models import OpenApiSpec  # noqa: E402
from openapi_fdw.utils import dump_json  # noqa: E402


# =============================================================================
# Fake Collaborators
# =============================================================================


class FakeTransport:
    """
    Records requests and replays canned responses.

    Responses are queued per (method, url). The last queued response for
    a route is repeated once the queue is down to one entry. Requests to
    unknown routes fail the test.
    """

    def __init__(self):
        self.requests: list[HttpRequest] = []
        self._routes: dict[tuple[HttpMethod, str], list[HttpResponse]] = {}

    def add(self, url, body=None, *, status=200, method=HttpMethod.GET):
        text = body if isinstance(body, str) else dump_json(body if body is not None else {})
        self._routes.setdefault((method, url), []).append(
            HttpResponse(status_code=status, body=text)
        )

    def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url))
        if not queue:
            raise AssertionError(f"Unexpected request: {request.method.value} {request.url}")
        return queue.pop(0) if len(queue) > 1 else queue[0]

    @property
    def urls(self) -> list[str]:
        return [r.url for r in self.requests]


class BrokenMetrics:
    """Metrics sink that always fails."""

    def inc(self, fdw_name, metric, value):
        raise RuntimeError("metrics backend down")


# =============================================================================
# Spec Fixtures
# =============================================================================


@pytest.fixture
def users_spec_dict():
    """OpenAPI document with a users collection, a wrapped orders list and refs."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Users API", "version": "1.0.0"},
        "servers": [{"url": "https://api.example.com/v1/"}],
        "paths": {
            "/users": {
                "get": {
                    "operationId": "listUsers",
                    "summary": "List users",
                    "parameters": [{"$ref": "#/components/parameters/Limit"}],
                    "responses": {
                        "200": {
                            "description": "Users",
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "array",
                                        "items": {"$ref": "#/components/schemas/User"},
                                    }
                                }
                            },
                        }
                    },
                },
                "post": {
                    "operationId": "createUser",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/User"}
                            }
                        }
                    },
                    "responses": {"201": {"description": "Created"}},
                },
            },
            "/users/{id}": {
                "get": {
                    "operationId": "getUser",
                    "responses": {"200": {"description": "User"}},
                },
                "patch": {
                    "operationId": "updateUser",
                    "responses": {"200": {"description": "Updated"}},
                },
                "delete": {
                    "operationId": "deleteUser",
                    "responses": {"204": {"description": "Deleted"}},
                },
            },
            "/store/orders": {
                "get": {
                    "operationId": "listOrders",
                    "responses": {
                        "200": {"$ref": "#/components/responses/OrderList"},
                    },
                }
            },
            "/health": {
                "get": {
                    "operationId": "health",
                    "responses": {
                        "200": {
                            "description": "OK",
                            "content": {
                                "text/plain": {"schema": {"type": "string"}},
                            },
                        }
                    },
                }
            },
        },
        "components": {
            "schemas": {
                "User": {
                    "type": "object",
                    "required": ["id", "userName"],
                    "properties": {
                        "id": {"type": "string", "format": "uuid"},
                        "userName": {"type": "string"},
                        "age": {"type": "integer", "format": "int32"},
                        "score": {"type": "number", "format": "double"},
                        "active": {"type": "boolean"},
                        "createdAt": {"type": "string", "format": "date-time"},
                        "birthday": {"type": "string", "format": "date"},
                        "address": {"$ref": "#/components/schemas/Address"},
                        "tags": {"type": "array", "items": {"type": "string"}},
                    },
                },
                "Address": {
                    "type": "object",
                    "properties": {"city": {"type": "string"}},
                },
                "Order": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "total": {"type": "number"},
                    },
                },
            },
            "parameters": {
                "Limit": {"name": "limit", "in": "query", "schema": {"type": "integer"}},
            },
            "responses": {
                "OrderList": {
                    "description": "Orders",
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "data": {
                                        "type": "array",
                                        "items": {"$ref": "#/components/schemas/Order"},
                                    },
                                    "has_more": {"type": "boolean"},
                                },
                            }
                        }
                    },
                }
            },
        },
    }


@pytest.fixture
def users_spec(users_spec_dict):
    return OpenApiSpec.from_dict(users_spec_dict)


# =============================================================================
# Host Fixtures
# =============================================================================


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def metrics():
    return InMemoryMetrics()


@pytest.fixture
def server_options():
    return {"base_url": "https://api.example.com", "page_size": "0"}


@pytest.fixture
def make_fdw(transport, metrics, server_options):
    """Factory creating an initialized OpenApiFdw against the fake transport."""

    def _make(options=None, *, secrets=None, spec=None, metrics_sink=None):
        services = HostServices(
            transport=transport,
            secrets=secrets if secrets is not None else MappingSecretStore({}),
            metrics=metrics_sink if metrics_sink is not None else metrics,
        )
        ctx = Context(server_options=options if options is not None else server_options)
        return OpenApiFdw.init(ctx, services, spec=spec)

    return _make


@pytest.fixture
def broken_metrics():
    return BrokenMetrics()
