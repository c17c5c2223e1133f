"""
Host-side contract: relational types, collaborator protocols and their
default implementations.

LocalHost lives in openapi_fdw.host.local and is exported from the
top-level package.
"""

from .clock import SystemClock
from .http import HttpxTransport
from .metrics import InMemoryMetrics, NullMetrics
from .protocol import (
    Clock,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    Metric,
    Metrics,
    SecretStore,
    Transport,
    error_for_status,
)
from .secrets import EnvSecretStore, MappingSecretStore
from .types import (
    Cell,
    Column,
    Context,
    HostContext,
    ImportForeignSchemaStmt,
    ImportSchemaType,
    OptionsType,
    Qual,
    Row,
    TypeOid,
)

__all__ = [
    # Relational types
    "TypeOid",
    "Cell",
    "Column",
    "Qual",
    "Row",
    "OptionsType",
    "HostContext",
    "Context",
    "ImportSchemaType",
    "ImportForeignSchemaStmt",
    # Protocols
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "Transport",
    "SecretStore",
    "Clock",
    "Metric",
    "Metrics",
    "error_for_status",
    # Implementations
    "HttpxTransport",
    "SystemClock",
    "InMemoryMetrics",
    "NullMetrics",
    "MappingSecretStore",
    "EnvSecretStore",
]
