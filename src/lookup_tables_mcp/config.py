# Lookup Tables MCP Server
# File: config.py
# Version: v1

"""Configuration loading for the Lookup Tables MCP Server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SERVICE_PRINCIPAL_KEY = "SERVICE_PRINCIPAL_KEY"
ACCESS_KEY = "ACCESS_KEY"

DEFAULT_PROJECT_SCOPE = "project/Global"


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_float_env(
    name: str,
    default: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> float:
    """Parse a float environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = float(default)
    else:
        try:
            value = float(str(raw).strip())
        except ValueError:
            value = float(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


def _load_dotenv_file(path: str) -> bool:
    """Load KEY=VALUE pairs from a .env file into os.environ if it exists."""
    dotenv_path = Path(path)
    if not dotenv_path.is_file():
        return False
    # Values in the file win over the process environment.
    load_dotenv(dotenv_path, override=True)
    logger.debug("Loaded environment from %s", dotenv_path)
    return True


@dataclass
class LookupTablesConfig:
    """Credentials and HTTP settings required to talk to the lookup tables API."""

    service_principal_key: str | None
    access_key_base64: str | None
    project_scope: str = DEFAULT_PROJECT_SCOPE

    verify_tls: bool = True
    http_timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "LookupTablesConfig":
        """Create configuration from environment variables.

        A ``.env`` file (``LOOKUP_TABLES_DOTENV`` or ``.env`` in the working
        directory) is loaded first when present.
        """
        path = dotenv_path or os.getenv("LOOKUP_TABLES_DOTENV") or ".env"
        _load_dotenv_file(path)

        project_scope = os.getenv("LOOKUP_TABLES_PROJECT_SCOPE")
        if project_scope is None or not project_scope.strip():
            project_scope = DEFAULT_PROJECT_SCOPE

        return cls(
            service_principal_key=os.getenv(SERVICE_PRINCIPAL_KEY),
            access_key_base64=os.getenv(ACCESS_KEY),
            project_scope=project_scope.strip(),
            verify_tls=_parse_bool_env("LOOKUP_TABLES_VERIFY_TLS", default=True),
            http_timeout_seconds=_parse_float_env(
                "LOOKUP_TABLES_HTTP_TIMEOUT", default=60.0, min_value=1.0, max_value=600.0
            ),
        )
