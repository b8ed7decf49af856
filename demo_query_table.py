# demo_query_table.py
# Version: v1

r"""
Demo: stream a lookup table as CSV with the library client, one row at a time.

Usage:

  export LOOKUP_TABLES_TEST_TABLE="Prices"
  export LOOKUP_TABLES_TEST_FILTER="Price gt 20"    # optional
  python demo_query_table.py
"""

from __future__ import annotations

import asyncio
import os
from typing import Any, Dict

from lookup_tables_mcp.client import ODataApiClient
from lookup_tables_mcp.codec import csv_header, row_to_csv
from lookup_tables_mcp.config import LookupTablesConfig
from lookup_tables_mcp.models import ODataQueryParameters
from lookup_tables_mcp.scope import build_scope

TABLE = os.environ.get("LOOKUP_TABLES_TEST_TABLE", "Prices")
FILTER_EXPR = os.environ.get("LOOKUP_TABLES_TEST_FILTER") or None


async def main() -> None:
    cfg = LookupTablesConfig.from_env()
    scope = build_scope(True, False, cfg.project_scope)

    async with ODataApiClient.from_service_principal_key(
        cfg.service_principal_key, cfg.access_key_base64, scope, config=cfg
    ) as client:
        columns = await client.get_table_columns(TABLE)
        print(csv_header(columns))

        def print_row(row: Dict[str, Any]) -> None:
            print(row_to_csv(row))

        count = await client.query(
            TABLE,
            print_row,
            ODataQueryParameters(select=",".join(columns), filter=FILTER_EXPR),
        )

    print(f"-- {count} rows")


if __name__ == "__main__":
    asyncio.run(main())
