# Lookup Tables MCP Server
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint for the Lookup Tables MCP server.

This is the script behind the ``lookup-tables-mcp`` console command.

It:

- configures logging on stderr (stdout carries the MCP protocol),
- creates a FastMCP server,
- registers the lookup table tools, and
- runs the built-in stdio transport.
"""

from __future__ import annotations

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP

from ..tools import tasks


def main() -> None:
    """Synchronous entrypoint for console_scripts."""
    logging.basicConfig(
        stream=sys.stderr,
        level=os.getenv("LOOKUP_TABLES_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    mcp = FastMCP("lookup-tables-mcp")

    # Register core MCP tools (list, schema, query, replace, connection info)
    tasks.register_tools(mcp)

    # Let FastMCP handle stdio + event loop setup.
    mcp.run()


if __name__ == "__main__":
    main()
