"""
OpenAPI Foreign Data Wrapper.

Exposes any REST API described by an OpenAPI 3.x document as relational
foreign tables:

    - spec: parse documents, resolve schemas, extract endpoints
    - tables: generate CREATE FOREIGN TABLE statements
    - adapter: scan with pagination, insert/update/delete
    - host: the contract with the database host

Quick start:
    from openapi_fdw import LocalHost
    from openapi_fdw.host import Column, TypeOid

    with LocalHost({"base_url": "https://api.example.com"}) as host:
        rows = host.select({"endpoint": "/users"}, [Column("id", TypeOid.STRING)])
"""

from .adapter.fdw import FDW_NAME, HostServices, OpenApiFdw, build_headers
from .errors import (
    CellConversionError,
    ConfigurationError,
    FdwError,
    OperationNotAllowedError,
    ParseError,
    ResponseShapeError,
    RowIdError,
    SpecParseError,
    TransportError,
)
from .host.local import LocalHost
from .spec import OpenApiSpec, SchemaResolver, extract_endpoints
from .tables import TableGenerator, generate_all_tables

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Session
    "FDW_NAME",
    "OpenApiFdw",
    "HostServices",
    "build_headers",
    "LocalHost",
    # Spec
    "OpenApiSpec",
    "SchemaResolver",
    "extract_endpoints",
    "TableGenerator",
    "generate_all_tables",
    # Errors
    "FdwError",
    "TransportError",
    "ParseError",
    "SpecParseError",
    "CellConversionError",
    "ResponseShapeError",
    "RowIdError",
    "ConfigurationError",
    "OperationNotAllowedError",
]
