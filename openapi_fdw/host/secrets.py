"""
Default SecretStore implementations.
"""

from __future__ import annotations

import os
from collections.abc import Mapping


class MappingSecretStore:
    """Secrets from an in-memory mapping (tests, embedding)."""

    def __init__(self, secrets: Mapping[str, str] | None = None):
        self._secrets = dict(secrets or {})

    def get_secret(self, secret_id: str) -> str | None:
        return self._secrets.get(secret_id)


class EnvSecretStore:
    """
    Secrets from environment variables.

    The secret id is upper-cased, '-' becomes '_', and the prefix is
    prepended: with the default prefix, "github-token" reads
    OPENAPI_FDW_SECRET_GITHUB_TOKEN.
    """

    def __init__(self, prefix: str = "OPENAPI_FDW_SECRET_"):
        self._prefix = prefix

    def get_secret(self, secret_id: str) -> str | None:
        name = self._prefix + secret_id.upper().replace("-", "_")
        return os.environ.get(name)
