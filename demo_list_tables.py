# demo_list_tables.py
# Version: v1
#
# Demo: call the MCP-style list_tables task directly and print results.
#
# Usage (credentials in .env or the environment):
#
#   SERVICE_PRINCIPAL_KEY=...  ACCESS_KEY=...  python demo_list_tables.py

import asyncio
from typing import Any, Dict, List

from lookup_tables_mcp.tools import tasks


async def main() -> None:
    print("Calling MCP task: list_tables()")
    result: Dict[str, Any] = await tasks.list_tables()

    tables: List[str] = result.get("tables", [])
    print(f"Tables returned: {len(tables)}")

    for name in tables:
        print(f"- {name}")


if __name__ == "__main__":
    asyncio.run(main())
