# Lookup Tables MCP Server
# File: errors.py
# Version: v1

"""Structured exceptions raised by the lookup tables client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .models import TaskProgress


class LookupTablesError(Exception):
    """Base error for everything raised by this package."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "lookup_tables_error",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidArgumentError(LookupTablesError, ValueError):
    """A required input was missing or blank. Raised before any network call."""

    def __init__(self, argument: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Argument '{argument}' must not be empty.",
            code="invalid_argument",
            details={"argument": argument},
        )
        self.argument = argument


class TransportError(LookupTablesError):
    """The service answered with a non-success status, or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if url is not None:
            details["url"] = url
        if body:
            details["body_excerpt"] = body[:500]
        super().__init__(message, code="transport_error", status_code=status_code, details=details)
        self.body = body
        self.url = url


class AuthenticationError(TransportError):
    """The token endpoint rejected the client credentials."""


class SchemaParseError(LookupTablesError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code="schema_parse_error")


class TableNotFoundError(LookupTablesError):
    def __init__(self, table_name: str) -> None:
        super().__init__(
            f"Lookup table '{table_name}' not found. Verify that the table exists "
            "and that the project scope containing the table is specified.",
            code="table_not_found",
            details={"table_name": table_name},
        )
        self.table_name = table_name


class TaskFailedError(LookupTablesError):
    """A monitored task finished with status Failed."""

    def __init__(self, progress: "TaskProgress") -> None:
        super().__init__(
            _task_message(progress),
            code="task_failed",
            details={"task_id": progress.id, "errors": [e.to_dict() for e in progress.errors]},
        )
        self.progress = progress


class TaskCancelledError(LookupTablesError):
    """A monitored task finished with status Cancelled."""

    def __init__(self, progress: "TaskProgress") -> None:
        super().__init__(
            _task_message(progress),
            code="task_cancelled",
            details={"task_id": progress.id, "errors": [e.to_dict() for e in progress.errors]},
        )
        self.progress = progress


def _task_message(progress: "TaskProgress") -> str:
    message = f"Task with id '{progress.id}' {progress.status.value}."
    if progress.errors:
        problems = "; ".join(e.describe() for e in progress.errors)
        message = f"{message} {problems}"
    return message


__all__ = [
    "LookupTablesError",
    "InvalidArgumentError",
    "TransportError",
    "AuthenticationError",
    "SchemaParseError",
    "TableNotFoundError",
    "TaskFailedError",
    "TaskCancelledError",
]
