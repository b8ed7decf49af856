# Lookup Tables MCP Server
# File: pager.py
# Version: v1

"""Walk a paginated OData collection one page and one row at a time."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import quote

from .errors import InvalidArgumentError, LookupTablesError
from .models import ODataQueryParameters
from .transport import Transport

logger = logging.getLogger(__name__)

NEXT_LINK = "@odata.nextLink"

Row = Dict[str, Any]
RowCallback = Callable[[Row], Union[None, Awaitable[None]]]


def table_url(table_name: str, parameters: Optional[ODataQueryParameters] = None) -> str:
    url = f"table/{quote(table_name, safe='')}"
    if parameters is not None:
        url = parameters.append_query_string(url)
    return url


class QueryPager:
    """Delivers every row of a table query, in server order, to a callback.

    Only one page is held in memory and only one request is in flight. The
    callback may be a coroutine function; it is awaited before the next row
    is delivered. HTTP failures propagate immediately, rows already delivered
    stay delivered.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def query(
        self,
        table_name: str,
        row_callback: RowCallback,
        parameters: Optional[ODataQueryParameters] = None,
    ) -> int:
        """Run the query and return the number of rows delivered."""
        if table_name is None or not table_name.strip():
            raise InvalidArgumentError("table_name")

        url: Optional[str] = table_url(table_name, parameters)
        row_count = 0
        page_count = 0

        while url:
            content = await self._transport.get_json(url)
            if not isinstance(content, dict):
                raise LookupTablesError(
                    f"Unexpected response for table '{table_name}': expected JSON object, "
                    f"got {type(content).__name__}."
                )
            page_count += 1

            rows = content.get("value")
            if rows is None:
                rows = []
            elif not isinstance(rows, list):
                raise LookupTablesError(
                    f"Unexpected response for table '{table_name}': expected 'value' "
                    f"to be a JSON array, got {type(rows).__name__}."
                )
            logger.debug("Table '%s' page %d: %d rows", table_name, page_count, len(rows))
            for row in rows:
                result = row_callback(row)
                if inspect.isawaitable(result):
                    await result
                row_count += 1

            next_link = content.get(NEXT_LINK)
            url = next_link if isinstance(next_link, str) and next_link.strip() else None

        logger.debug(
            "Table '%s' query finished: %d rows in %d pages", table_name, row_count, page_count
        )
        return row_count
