"""
Configuration schemas for the OpenAPI FDW.

Pydantic models for the options declared on the foreign server and on
each foreign table. Hosts hand options over as a flat str -> str map;
these models give them types and defaults.

Security:
    Literal credentials use SecretStr so they are masked in logs and
    reprs. Access the value with `.get_secret_value()`.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from openapi_fdw.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE_PARAM = "limit"
DEFAULT_CURSOR_PARAM = "after"
DEFAULT_API_KEY_HEADER = "Authorization"
DEFAULT_ROWID_COLUMN = "id"

_TRUE_VALUES = {"true", "t", "yes", "y", "on", "1"}


def _lenient_page_size(value: Any, default: int | None) -> int | None:
    """Parse a page size option, falling back to the default when malformed."""
    if value is None or isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning(f"[openapi_fdw] Ignoring invalid page_size '{value}'")
        return default


class ServerOptions(BaseModel):
    """
    Options declared on the foreign server.

    Either base_url or a spec_url whose document lists servers is needed
    before a request can be made.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    base_url: str = Field("", description="API base URL, trailing '/' stripped")
    spec_url: str | None = Field(None, description="URL of the OpenAPI document")

    # Authentication
    api_key: SecretStr | None = Field(None, description="Literal API key")
    api_key_id: str | None = Field(None, description="Secret id of the API key")
    api_key_header: str = Field(DEFAULT_API_KEY_HEADER, description="Header carrying the API key")
    api_key_prefix: str | None = Field(None, description="Prefix before the key, e.g. 'Token'")
    bearer_token: SecretStr | None = Field(None, description="Literal bearer token")
    bearer_token_id: str | None = Field(None, description="Secret id of the bearer token")

    # Pagination defaults (tables may override)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=0)
    page_size_param: str = DEFAULT_PAGE_SIZE_PARAM
    cursor_param: str = DEFAULT_CURSOR_PARAM

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: Any) -> Any:
        return value.rstrip("/") if isinstance(value, str) else value

    @field_validator("page_size", mode="before")
    @classmethod
    def _parse_page_size(cls, value: Any) -> Any:
        return _lenient_page_size(value, DEFAULT_PAGE_SIZE)


class ScanTableOptions(BaseModel):
    """Options of a foreign table as read by scans."""

    model_config = ConfigDict(extra="allow", frozen=True)

    endpoint: str = Field(..., description="Collection path, e.g. /users")
    rowid_column: str = DEFAULT_ROWID_COLUMN
    response_path: str | None = Field(None, description="JSON Pointer to the rows")
    object_path: str | None = Field(None, description="JSON Pointer applied to each row")
    cursor_path: str = Field("", description="JSON Pointer to the next cursor")

    # Overrides of the server defaults
    cursor_param: str | None = None
    page_size_param: str | None = None
    page_size: int | None = Field(None, ge=0)

    @field_validator("page_size", mode="before")
    @classmethod
    def _parse_page_size(cls, value: Any) -> Any:
        return _lenient_page_size(value, None)


class ModifyTableOptions(BaseModel):
    """Options of a foreign table as read by insert/update/delete."""

    model_config = ConfigDict(extra="allow", frozen=True)

    endpoint: str
    rowid_column: str
    insertable: bool = True
    updatable: bool = True
    deletable: bool = True

    @field_validator("insertable", "updatable", "deletable", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_VALUES
        return value


OptionsModel = TypeVar("OptionsModel", bound=BaseModel)


def load_options(model: type[OptionsModel], options: dict[str, str]) -> OptionsModel:
    """
    Validate a host option map against an options model.

    Raises:
        ConfigurationError: Naming the missing or invalid options
    """
    try:
        return model.model_validate(options)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"]) or "options"
            if error["type"] == "missing":
                problems.append(f"missing required option '{name}'")
            else:
                problems.append(f"invalid option '{name}': {error['msg']}")
        raise ConfigurationError("; ".join(problems)) from e
