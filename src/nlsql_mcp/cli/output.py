"""Output format selection and rendering."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nlsql_mcp.core.models import QueryResult
    from nlsql_mcp.formatters.base import Formatter


class OutputFormat(StrEnum):
    FORMATTED = "formatted"
    QUERY_ONLY = "query_only"
    CSV = "csv"
    JSON = "json"


_ALIASES: dict[str, OutputFormat] = {
    "table": OutputFormat.FORMATTED,
    "sql": OutputFormat.QUERY_ONLY,
    "sql_only": OutputFormat.QUERY_ONLY,
    "sql-only": OutputFormat.QUERY_ONLY,
    "query-only": OutputFormat.QUERY_ONLY,
}

# Registry names for the formats that render a QueryResult.
_FORMATTER_NAMES: dict[OutputFormat, str] = {
    OutputFormat.FORMATTED: "table",
    OutputFormat.CSV: "csv",
    OutputFormat.JSON: "json",
}


def resolve_format(format_flag: str | None) -> OutputFormat:
    """Map a caller-supplied format name onto OutputFormat.

    Matching is case-insensitive. Unknown or missing values fall back to
    the formatted table.
    """
    if not format_flag:
        return OutputFormat.FORMATTED
    name = format_flag.strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return OutputFormat(name)
    except ValueError:
        return OutputFormat.FORMATTED


def get_formatter(output_format: OutputFormat) -> Formatter:
    """Build the formatter for a result-rendering format."""
    # Import here to trigger registry population from formatter modules.
    import nlsql_mcp.formatters.csv  # noqa: F401
    import nlsql_mcp.formatters.json  # noqa: F401
    import nlsql_mcp.formatters.table  # noqa: F401
    from nlsql_mcp.formatters.base import registry

    if output_format not in _FORMATTER_NAMES:
        msg = f"Format {output_format.value!r} does not render query results"
        raise KeyError(msg)
    return registry.get(_FORMATTER_NAMES[output_format])


def render(formatter: Formatter, result: QueryResult) -> str:
    """Join formatter lines into the reply text, newline-terminated."""
    return "".join(line + "\n" for line in formatter.format(result))
