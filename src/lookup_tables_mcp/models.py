# Lookup Tables MCP Server
# File: models.py
# Version: v1

"""Domain models used by the lookup tables client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote


@dataclass(frozen=True)
class Property:
    """A single column of a lookup table, as declared in the EDM schema."""

    name: str
    system_type: Optional[type] = None

    # None when the Nullable attribute is absent (semantically nullable).
    nullable: Optional[bool] = None

    # Raw EDM type name, e.g. "Edm.String".
    type_name: Optional[str] = None

    @property
    def is_nullable(self) -> bool:
        return self.nullable is not False


@dataclass(frozen=True)
class Entity:
    """A lookup table definition: its name, key column and ordered columns."""

    name: str
    key_name: Optional[str]
    properties: Tuple[Property, ...] = ()

    def column_names(self, include_key: bool = False) -> List[str]:
        """Column names in declaration order, excluding the key by default."""
        return [
            p.name
            for p in self.properties
            if include_key or p.name != self.key_name
        ]


class TaskStatus(str, Enum):
    NotStarted = "NotStarted"
    InProgress = "InProgress"
    Completed = "Completed"
    Failed = "Failed"
    Cancelled = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    @classmethod
    def parse(cls, raw: Any) -> "TaskStatus":
        """Accept the string name (any case) or the integer ordinal."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            members = list(cls)
            if 0 <= raw < len(members):
                return members[raw]
        if isinstance(raw, str):
            for member in cls:
                if member.value.lower() == raw.strip().lower():
                    return member
        raise ValueError(f"Unknown task status: {raw!r}")


_TERMINAL_STATUSES = frozenset(
    {TaskStatus.Completed, TaskStatus.Failed, TaskStatus.Cancelled}
)


def _get_ci(data: Mapping[str, Any], name: str) -> Any:
    """Case-insensitive key lookup (the service may use Pascal or camel case)."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    if not raw or not isinstance(raw, str):
        return None
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class ProblemDetails:
    """RFC 7807 problem detail record reported by a failed task."""

    type: Optional[str] = None
    title: Optional[str] = None
    status: Optional[int] = None
    detail: Optional[str] = None
    instance: Optional[str] = None
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "ProblemDetails":
        if not isinstance(data, Mapping):
            return cls(detail=str(data))
        known = {"type", "title", "status", "detail", "instance"}
        status = _get_ci(data, "status")
        return cls(
            type=_get_ci(data, "type"),
            title=_get_ci(data, "title"),
            status=status if isinstance(status, int) else None,
            detail=_get_ci(data, "detail"),
            instance=_get_ci(data, "instance"),
            extensions={k: v for k, v in data.items() if str(k).lower() not in known},
        )

    def describe(self) -> str:
        parts = [p for p in (self.title, self.detail) if p]
        return ": ".join(parts) if parts else "Unknown error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
            "instance": self.instance,
            **self.extensions,
        }


@dataclass(frozen=True)
class TaskProgress:
    """Immutable snapshot of a server-side task, built from one poll response."""

    id: str
    type: Optional[str]
    percent_complete: int
    status: TaskStatus
    errors: Tuple[ProblemDetails, ...] = ()
    result: Any = None
    start_time: Optional[datetime] = None
    last_update_time: Optional[datetime] = None

    # Raw JSON payload from the API, for debugging / advanced use.
    raw: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaskProgress":
        percent = _get_ci(data, "PercentComplete")
        try:
            percent_complete = int(percent) if percent is not None else 0
        except (TypeError, ValueError):
            percent_complete = 0

        raw_errors = _get_ci(data, "Errors") or []
        return cls(
            id=str(_get_ci(data, "Id") or ""),
            type=_get_ci(data, "Type"),
            percent_complete=percent_complete,
            status=TaskStatus.parse(_get_ci(data, "Status")),
            errors=tuple(ProblemDetails.from_dict(e) for e in raw_errors),
            result=_get_ci(data, "Result"),
            start_time=_parse_timestamp(_get_ci(data, "StartTime")),
            last_update_time=_parse_timestamp(_get_ci(data, "LastUpdateTime")),
            raw=dict(data),
        )


@dataclass
class ODataQueryParameters:
    """OData system query options for a table query.

    Each value is a raw query-language fragment, e.g. ``filter="Price gt 20"``.
    Escaping happens once, in :meth:`to_query_string`.
    """

    # Aggregation transformations, e.g. "groupby((City))".
    apply: Optional[str] = None

    # Boolean expression rows must satisfy, e.g. "first_name eq 'Paolo'".
    filter: Optional[str] = None

    # Comma-separated list of returned columns; also fixes column order.
    select: Optional[str] = None

    orderby: Optional[str] = None

    def to_query_string(self) -> Optional[str]:
        """Escaped query string, or None when no option is set."""
        options = (
            ("$apply", self.apply),
            ("$filter", self.filter),
            ("$select", self.select),
            ("$orderby", self.orderby),
        )
        parts = [
            f"{name}={quote(value, safe='')}"
            for name, value in options
            if value is not None and value.strip()
        ]
        return "&".join(parts) if parts else None

    def append_query_string(self, url: str) -> str:
        qs = self.to_query_string()
        if qs is not None:
            url = f"{url}?{qs}"
        return url
