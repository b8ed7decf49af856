# Lookup Tables MCP Server
# File: client.py
# Version: v1
"""High-level client for the lookup tables OData API.

Implements:

- list_tables() via GET /table
- get_schema() via GET /table/$metadata
- query() via GET /table/<name>, following @odata.nextLink
- replace_all_rows() via POST /table/<name>/ReplaceAllRowsAsync
- monitor_task() via GET /general/Tasks(<id>)
"""

from __future__ import annotations

import logging
from typing import IO, Any, Dict, List, Optional, Union
from urllib.parse import quote

from .auth import AccessKey, Authenticator, OAuthClient, odata_api_base_uri
from .config import LookupTablesConfig
from .errors import InvalidArgumentError, LookupTablesError, TableNotFoundError
from .models import Entity, ODataQueryParameters, TaskProgress
from .monitor import POLL_INTERVAL_SECONDS, ProgressCallback, TaskMonitor
from .pager import QueryPager, RowCallback
from .schema import parse_schema
from .transport import Transport

logger = logging.getLogger(__name__)

TableContent = Union[bytes, IO[bytes]]


def _require(value: Optional[str], name: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgumentError(name)
    return value


class ODataApiClient:
    """Wrapper around the lookup tables API endpoints.

    All operations are coroutines with at most one request in flight; cancel
    the awaiting task to abort one.
    """

    def __init__(self, transport: Transport, poll_interval: float = POLL_INTERVAL_SECONDS) -> None:
        self.transport = transport
        self._pager = QueryPager(transport)
        self._monitor = TaskMonitor(transport, poll_interval=poll_interval)

    @classmethod
    def from_service_principal_key(
        cls,
        service_principal_key: Optional[str],
        access_key: Union[AccessKey, str, None],
        scope: str,
        config: Optional[LookupTablesConfig] = None,
        authenticator: Optional[Authenticator] = None,
    ) -> "ODataApiClient":
        """Create a client authenticated as a service principal.

        ``scope`` is e.g. ``"table.Read table.Write project/Global"``;
        see :func:`lookup_tables_mcp.scope.build_scope`.
        """
        if scope is None or not scope.strip():
            raise InvalidArgumentError("scope")
        if not isinstance(access_key, AccessKey):
            access_key = AccessKey.from_base64(access_key)

        verify_tls = config.verify_tls if config else True
        timeout = config.http_timeout_seconds if config else 60.0

        if authenticator is None:
            authenticator = OAuthClient(
                access_key=access_key,
                service_principal_key=_require(service_principal_key, "service_principal_key"),
                timeout=timeout,
                verify_tls=verify_tls,
            )

        transport = Transport(
            base_url=odata_api_base_uri(access_key.domain),
            authenticator=authenticator,
            scope=scope,
            timeout=timeout,
            verify_tls=verify_tls,
        )
        return cls(transport)

    async def __aenter__(self) -> "ODataApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    # ------------------------------------------------------------------
    # Tables & schema
    # ------------------------------------------------------------------

    async def list_tables(self) -> List[str]:
        """Names of the lookup tables accessible with the current scope."""
        data = await self.transport.get_json("table")
        raw_items = data.get("value") if isinstance(data, dict) else None

        names: List[str] = []
        if isinstance(raw_items, list):
            for item in raw_items:
                if not isinstance(item, dict):
                    continue
                if item.get("kind") == "EntitySet":
                    names.append(item.get("name"))
        return names

    async def get_schema(self) -> Dict[str, Entity]:
        """Definitions of the accessible tables, keyed by table name."""
        response = await self.transport.get("table/$metadata", accept="application/xml")
        return parse_schema(response.content)

    async def get_table_columns(self, table_name: str, include_key: bool = False) -> List[str]:
        """Column names of one table, key column excluded unless asked for."""
        _require(table_name, "table_name")
        entities = await self.get_schema()
        entity = entities.get(table_name)
        if entity is None:
            raise TableNotFoundError(table_name)
        return entity.column_names(include_key=include_key)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    async def query(
        self,
        table_name: str,
        row_callback: RowCallback,
        parameters: Optional[ODataQueryParameters] = None,
    ) -> int:
        """Stream every matching row of ``table_name`` to ``row_callback``."""
        return await self._pager.query(table_name, row_callback, parameters)

    # ------------------------------------------------------------------
    # Replace & tasks
    # ------------------------------------------------------------------

    async def replace_all_rows(
        self,
        table_name: str,
        filename_with_extension: str,
        content: TableContent,
    ) -> str:
        """Upload a file that replaces the whole table; returns the task id.

        The file extension tells the service how to read the content (e.g.
        ``.csv``). The key column must not be part of the file. Pass the id to
        :meth:`monitor_task` to follow the import.
        """
        _require(table_name, "table_name")
        _require(filename_with_extension, "filename_with_extension")
        if content is None:
            raise InvalidArgumentError("content")

        url = f"table/{quote(table_name, safe='')}/ReplaceAllRowsAsync"
        response = await self.transport.post(
            url,
            files={"file": (filename_with_extension, content)},
        )

        data = response.json()
        task_id = data.get("taskId") if isinstance(data, dict) else None
        if not task_id:
            raise LookupTablesError(
                f"Replace response for table '{table_name}' did not contain 'taskId'.",
                status_code=response.status_code,
            )
        logger.info("Replace of table '%s' started as task %s", table_name, task_id)
        return str(task_id)

    async def get_task(self, task_id: str) -> TaskProgress:
        """Single snapshot of a task, without waiting for it to finish."""
        _require(task_id, "task_id")
        return await self._monitor.poll(task_id)

    async def monitor_task(self, task_id: str, progress_callback: ProgressCallback) -> TaskProgress:
        """Poll a task until it ends, reporting every snapshot to the callback."""
        return await self._monitor.monitor(task_id, progress_callback)
