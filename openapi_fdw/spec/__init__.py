"""
OpenAPI document model, schema resolution and endpoint extraction.
"""

from .endpoints import (
    EndpointInfo,
    extract_endpoints,
    merge_parameters,
    response_schema,
    table_name_for_path,
)
from .models import (
    Components,
    Info,
    MediaType,
    OpenApiSpec,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    Response,
    Schema,
    SecurityScheme,
    Server,
)
from .resolver import SchemaResolver

__all__ = [
    # Model
    "OpenApiSpec",
    "Info",
    "Server",
    "PathItem",
    "Operation",
    "Parameter",
    "RequestBody",
    "Response",
    "MediaType",
    "Schema",
    "Components",
    "SecurityScheme",
    # Resolution
    "SchemaResolver",
    # Endpoints
    "EndpointInfo",
    "extract_endpoints",
    "merge_parameters",
    "response_schema",
    "table_name_for_path",
]
