# Lookup Tables MCP Server
# File: scope.py
# Version: v1

"""OAuth scope strings for the lookup tables API."""

from __future__ import annotations

from typing import Optional

from .errors import InvalidArgumentError

TABLE_READ_SCOPE = "table.Read"
TABLE_WRITE_SCOPE = "table.Write"


def build_scope(allow_read: bool, allow_write: bool, project_scope: Optional[str]) -> str:
    """Compose the scope requested from the token endpoint.

    Example: ``build_scope(True, True, "project/Global")`` returns
    ``"table.Read table.Write project/Global"``. An empty project scope is
    valid; ``None`` is not.
    """
    if project_scope is None:
        raise InvalidArgumentError("project_scope", "Argument 'project_scope' is required.")

    parts = []
    if allow_read:
        parts.append(TABLE_READ_SCOPE)
    if allow_write:
        parts.append(TABLE_WRITE_SCOPE)
    parts.append(project_scope.strip())
    return " ".join(parts).strip()
