# Lookup Tables MCP Server
# File: codec.py
# Version: v1

"""Row formatting: JSON rows from the OData API to CSV lines or JSON text."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from .errors import InvalidArgumentError

CSV_SEPARATOR = ","


def _format_number(value: Any) -> str:
    # Fixed-point, locale-independent; floats go through repr to keep the
    # shortest round-tripping digits.
    if isinstance(value, int):
        return str(value)
    number = value if isinstance(value, Decimal) else Decimal(repr(value))
    if not number.is_finite():
        return ""
    return format(number, "f")


def _format_field(value: Any) -> str:
    if isinstance(value, str):
        if CSV_SEPARATOR in value or '"' in value:
            return '"' + value.replace('"', '""') + '"'
        return value
    # bool is a subclass of int, check it first.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return _format_number(value)
    return ""


def row_to_csv(row: Any) -> str:
    """Render one row as a CSV line (no header, no line terminator).

    Fields keep the row's key order. Nulls, nested objects and arrays render
    as empty fields.
    """
    if not isinstance(row, Mapping):
        raise InvalidArgumentError(
            "row",
            f"Expected a JSON object row, got {type(row).__name__}.",
        )
    return CSV_SEPARATOR.join(_format_field(v) for v in row.values())


def _json_value(value: Any) -> str:
    if isinstance(value, Decimal):
        return format(value, "f") if value.is_finite() else "null"
    if isinstance(value, Mapping):
        members = (
            f"{json.dumps(str(k), ensure_ascii=False)}: {_json_value(v)}" for k, v in value.items()
        )
        return "{" + ", ".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_json_value(v) for v in value) + "]"
    return json.dumps(value, ensure_ascii=False)


def row_to_json(row: Any) -> str:
    """Render one row as a JSON object, keeping Decimal values digit for digit."""
    if not isinstance(row, Mapping):
        raise InvalidArgumentError(
            "row",
            f"Expected a JSON object row, got {type(row).__name__}.",
        )
    return _json_value(row)


def parse_select(select: Optional[str]) -> List[str]:
    """Split a $select fragment into trimmed column names."""
    if not select:
        return []
    return [c.strip() for c in select.split(CSV_SEPARATOR) if c.strip()]


def csv_header(columns: Iterable[str]) -> str:
    return CSV_SEPARATOR.join(c.strip() for c in columns)
