# Lookup Tables MCP Server
# File: tools/tasks.py
# Version: v1
#
# NOTE: This module is the single place where we define "business logic"
# that is exposed as MCP tools.  The MCP transport simply calls
# `register_tools(server)` to wire these up.

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..auth import AccessKey
from ..client import ODataApiClient
from ..codec import csv_header, parse_select, row_to_csv, row_to_json
from ..config import LookupTablesConfig
from ..errors import (
    InvalidArgumentError,
    TableNotFoundError,
    TaskCancelledError,
    TaskFailedError,
)
from ..models import ODataQueryParameters, TaskProgress, TaskStatus
from ..scope import build_scope

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("json", "csv", "csv_no_header")

DEFAULT_MAX_INLINE_ROWS = 500


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


class _RowLimitReached(Exception):
    """Raised from a row callback to stop an inline query early."""


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _make_client(
    allow_read: bool,
    allow_write: bool,
    project_scope: Optional[str] = None,
    cfg: Optional[LookupTablesConfig] = None,
) -> ODataApiClient:
    """Create an ODataApiClient from environment variables / .env.

    Tests replace this function with a lambda returning a fake client.
    """
    cfg = cfg or LookupTablesConfig.from_env()
    scope = build_scope(allow_read, allow_write, project_scope or cfg.project_scope)
    return ODataApiClient.from_service_principal_key(
        cfg.service_principal_key,
        cfg.access_key_base64,
        scope,
        config=cfg,
    )


def _row_formatter(output_format: str) -> Callable[[Dict[str, Any]], str]:
    if output_format == "json":
        return row_to_json
    return row_to_csv


class _RowWriter:
    """Frames formatted rows with header, separators and footer."""

    def __init__(self, sink: Any, header: str, separator: str, footer: str) -> None:
        self._sink = sink
        self._separator = separator
        self._footer = footer
        self.row_count = 0
        sink.write(header)

    def write(self, text: str) -> None:
        if not text.strip():
            return
        if self.row_count:
            self._sink.write(self._separator)
        self._sink.write(text)
        self.row_count += 1

    def close(self) -> None:
        self._sink.write(self._footer)


class _TextSink:
    def __init__(self) -> None:
        self.parts: List[str] = []

    def write(self, text: str) -> None:
        self.parts.append(text)

    def getvalue(self) -> str:
        return "".join(self.parts)


# ---------------------------------------------------------------------------
# Core async tasks (library-style)
# ---------------------------------------------------------------------------


async def list_tables(project_scope: Optional[str] = None) -> Dict[str, Any]:
    client = _make_client(True, False, project_scope)
    try:
        names = await client.list_tables()
    finally:
        await client.aclose()
    return {"tables": names, "count": len(names)}


async def get_table_schema(table_name: str, project_scope: Optional[str] = None) -> Dict[str, Any]:
    if not table_name or not table_name.strip():
        raise InvalidArgumentError("table_name")
    table_name = table_name.strip()

    client = _make_client(True, False, project_scope)
    try:
        entities = await client.get_schema()
    finally:
        await client.aclose()

    entity = entities.get(table_name)
    if entity is None:
        raise TableNotFoundError(table_name)

    columns = [
        {
            "name": p.name,
            "type": p.type_name,
            "nullable": p.nullable,
            "is_key": p.name == entity.key_name,
        }
        for p in entity.properties
    ]
    return {
        "table_name": entity.name,
        "key_name": entity.key_name,
        "columns": columns,
        "default_columns": entity.column_names(),
    }


async def query_table(
    table_name: str,
    project_scope: Optional[str] = None,
    output_format: str = "json",
    filter_expr: Optional[str] = None,
    file_path: Optional[str] = None,
    max_rows: int = DEFAULT_MAX_INLINE_ROWS,
    select: Optional[str] = None,
) -> Dict[str, Any]:
    """Export a table as JSON or CSV, to a file or inline.

    ``select`` is a comma-separated column list. Without it, CSV output
    selects the table's non-key columns (read from $metadata) so columns
    line up with the header. Inline output stops after ``max_rows``
    rows; file output is never truncated.
    """
    started = time.monotonic()
    if not table_name or not table_name.strip():
        raise InvalidArgumentError("table_name")
    table_name = table_name.strip()

    output_format = (output_format or "json").strip().lower()
    if output_format not in OUTPUT_FORMATS:
        raise InvalidArgumentError(
            "output_format",
            f"Unsupported output format '{output_format}'. Use one of: {', '.join(OUTPUT_FORMATS)}.",
        )

    client = _make_client(True, False, project_scope)
    try:
        columns = parse_select(select)
        select = csv_header(columns) if columns else None
        if output_format == "json":
            header, separator, footer = "[\n", ",\n", "\n]"
        else:
            if not columns:
                columns = await client.get_table_columns(table_name)
                select = csv_header(columns)
            header = select + "\n" if output_format == "csv" else ""
            separator, footer = "\n", ""

        parameters = ODataQueryParameters(select=select, filter=filter_expr)
        format_row = _row_formatter(output_format)

        if file_path:
            path = Path(file_path)
            with path.open("w", encoding="utf-8", newline="") as fh:
                writer = _RowWriter(fh, header, separator, footer)
                await client.query(table_name, lambda row: writer.write(format_row(row)), parameters)
                writer.close()

            logger.info(
                "Exported %d rows of '%s' to %s in %dms",
                writer.row_count,
                table_name,
                path,
                _elapsed_ms(started),
            )
            return {
                "table_name": table_name,
                "format": output_format,
                "file_path": str(path),
                "row_count": writer.row_count,
                "truncated": False,
                "elapsed_ms": _elapsed_ms(started),
            }

        limit = max(int(max_rows), 1)
        sink = _TextSink()
        writer = _RowWriter(sink, header, separator, footer)

        def collect(row: Dict[str, Any]) -> None:
            if writer.row_count >= limit:
                raise _RowLimitReached()
            writer.write(format_row(row))

        truncated = False
        try:
            await client.query(table_name, collect, parameters)
        except _RowLimitReached:
            truncated = True
        writer.close()
    finally:
        await client.aclose()

    return {
        "table_name": table_name,
        "format": output_format,
        "content": sink.getvalue(),
        "row_count": writer.row_count,
        "truncated": truncated,
        "elapsed_ms": _elapsed_ms(started),
    }


def _progress_to_dict(progress: TaskProgress) -> Dict[str, Any]:
    return {
        "id": progress.id,
        "type": progress.type,
        "status": progress.status.value,
        "percent_complete": progress.percent_complete,
        "errors": [e.to_dict() for e in progress.errors],
        "result": progress.result,
        "start_time": progress.start_time.isoformat() if progress.start_time else None,
        "last_update_time": progress.last_update_time.isoformat()
        if progress.last_update_time
        else None,
    }


async def replace_table(
    table_name: str,
    file_path: str,
    project_scope: Optional[str] = None,
) -> Dict[str, Any]:
    """Replace all rows of a table with a file and wait for the import task.

    The key column ("_key") must not be part of the file.
    """
    started = time.monotonic()
    if not table_name or not table_name.strip():
        raise InvalidArgumentError("table_name")
    if not file_path or not file_path.strip():
        raise InvalidArgumentError("file_path")
    table_name = table_name.strip()
    path = Path(file_path.strip())

    client = _make_client(False, True, project_scope)
    try:
        with path.open("rb") as fh:
            task_id = await client.replace_all_rows(table_name, path.name, fh)

        def report(progress: TaskProgress) -> None:
            logger.info(
                "Task %s: %s (%d%%)", task_id, progress.status.value, progress.percent_complete
            )

        final = await client.monitor_task(task_id, report)
    finally:
        await client.aclose()

    if final.status == TaskStatus.Failed:
        raise TaskFailedError(final)
    if final.status == TaskStatus.Cancelled:
        raise TaskCancelledError(final)

    return {
        "table_name": table_name,
        "task_id": task_id,
        "status": final.status.value,
        "result": final.result,
        "task": _progress_to_dict(final),
        "elapsed_ms": _elapsed_ms(started),
    }


async def get_connection_info() -> Dict[str, Any]:
    """Redacted snapshot of the configuration (no secrets)."""
    cfg = LookupTablesConfig.from_env()

    domain = None
    access_key_error = None
    if cfg.access_key_base64:
        try:
            domain = AccessKey.from_base64(cfg.access_key_base64).domain
        except InvalidArgumentError as exc:
            access_key_error = exc.message

    return {
        "domain": domain,
        "project_scope": cfg.project_scope,
        "verify_tls": bool(cfg.verify_tls),
        "http_timeout_seconds": cfg.http_timeout_seconds,
        "credentials": {
            "service_principal_key_configured": bool(cfg.service_principal_key),
            "access_key_configured": bool(cfg.access_key_base64),
            "access_key_error": access_key_error,
        },
    }


# ---------------------------------------------------------------------------
# MCP tool registration
# ---------------------------------------------------------------------------


def register_tools(server: Any) -> None:
    """Register MCP tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(
        name="lookup_tables_list",
        description="List the lookup tables accessible in a project scope (default project/Global).",
    )
    async def mcp_list_tables(project_scope: Optional[str] = None) -> Dict[str, Any]:
        return await list_tables(project_scope=project_scope)

    @server.tool(
        name="lookup_tables_get_schema",
        description="Describe a lookup table: key column, columns, EDM types and nullability.",
    )
    async def mcp_get_table_schema(table_name: str, project_scope: Optional[str] = None) -> Dict[str, Any]:
        return await get_table_schema(table_name=table_name, project_scope=project_scope)

    @server.tool(
        name="lookup_tables_query",
        description=(
            "Query a lookup table with an optional OData $filter (e.g. \"Price gt 20\") and "
            "comma-separated select columns. Returns rows as json, csv or csv_no_header, inline "
            "or written to file_path."
        ),
    )
    async def mcp_query_table(
        table_name: str,
        project_scope: Optional[str] = None,
        output_format: str = "json",
        filter_expr: Optional[str] = None,
        file_path: Optional[str] = None,
        max_rows: int = DEFAULT_MAX_INLINE_ROWS,
        select: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await query_table(
            table_name=table_name,
            project_scope=project_scope,
            output_format=output_format,
            filter_expr=filter_expr,
            file_path=file_path,
            max_rows=max_rows,
            select=select,
        )

    @server.tool(
        name="lookup_tables_replace",
        description=(
            "Replace all rows of a lookup table with the content of a file (e.g. CSV) and wait for "
            "the import task to finish. The primary key column \"_key\" cannot be included."
        ),
    )
    async def mcp_replace_table(
        table_name: str,
        file_path: str,
        project_scope: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await replace_table(table_name=table_name, file_path=file_path, project_scope=project_scope)

    @server.tool(
        name="lookup_tables_get_connection_info",
        description="Return redacted connection configuration (no secrets).",
    )
    async def mcp_get_connection_info() -> Dict[str, Any]:
        return await get_connection_info()
