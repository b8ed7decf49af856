# Lookup Tables MCP Server
# File: transports/__init__.py
# Version: v1

"""MCP transports (stdio)."""
