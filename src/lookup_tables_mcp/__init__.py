# Lookup Tables MCP Server
# File: __init__.py
# Version: v1

"""Async client and MCP server for OData lookup tables."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .client import ODataApiClient
from .codec import row_to_csv, row_to_json
from .errors import (
    InvalidArgumentError,
    LookupTablesError,
    SchemaParseError,
    TransportError,
)
from .models import Entity, ODataQueryParameters, Property, TaskProgress, TaskStatus
from .scope import build_scope

__all__ = [
    "__version__",
    "ODataApiClient",
    "ODataQueryParameters",
    "Entity",
    "Property",
    "TaskProgress",
    "TaskStatus",
    "LookupTablesError",
    "InvalidArgumentError",
    "TransportError",
    "SchemaParseError",
    "build_scope",
    "row_to_csv",
    "row_to_json",
]


def _resolve_version() -> str:
    """Resolve installed distribution version.

    Falls back to a reasonable default when running from source without an
    installed distribution.
    """
    try:
        return version("lookup-tables-mcp")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _resolve_version()
