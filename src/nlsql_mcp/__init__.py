"""nlsql-mcp - natural-language SQL queries served over MCP."""

from nlsql_mcp.__about__ import __version__

__all__ = ["__version__"]
