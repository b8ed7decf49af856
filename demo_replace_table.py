# demo_replace_table.py
# Version: v1

r"""
Demo: replace all rows of a lookup table from a CSV file and follow the task.

Usage:

  export LOOKUP_TABLES_TEST_TABLE="Prices"
  export LOOKUP_TABLES_TEST_FILE="prices.csv"
  python demo_replace_table.py
"""

from __future__ import annotations

import asyncio
import os

from lookup_tables_mcp.tools.tasks import replace_table

TABLE = os.environ.get("LOOKUP_TABLES_TEST_TABLE", "Prices")
FILE = os.environ.get("LOOKUP_TABLES_TEST_FILE", "prices.csv")


async def main() -> None:
    print(f"Replacing all rows of '{TABLE}' with {FILE} ...")
    result = await replace_table(table_name=TABLE, file_path=FILE)
    print(f"Task {result['task_id']} {result['status']} in {result['elapsed_ms']}ms")
    print(f"Result: {result['result']}")


if __name__ == "__main__":
    asyncio.run(main())
