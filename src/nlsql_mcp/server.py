"""MCP server exposing the nl_query tool over stdio."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from nlsql_mcp.pipeline import NlQueryService

if TYPE_CHECKING:
    from nlsql_mcp.core.config import Settings

SERVER_NAME = "nlsql"


def build_server(settings: Settings, service: NlQueryService | None = None) -> FastMCP:
    """Create an MCP server with the natural-language query tool."""
    server = FastMCP(name=SERVER_NAME)
    nl_service = service or NlQueryService(settings)

    @server.tool()
    async def nl_query(prompt: str, output_format: str = "formatted") -> str:
        """Execute a natural language query against the database.

        output_format: "formatted" (text table, default), "query_only"
        (generated SQL, not executed), "csv" or "json". Results are capped
        at the configured row limit (100 by default).
        """
        return await nl_service.run(prompt, output_format)

    return server


def serve(settings: Settings) -> None:
    """Run the MCP server on stdio until the client disconnects."""
    build_server(settings).run(transport="stdio")
