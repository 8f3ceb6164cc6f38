"""Output formatters for nlsql-mcp."""

from nlsql_mcp.formatters.base import Formatter, FormatterRegistry, registry
from nlsql_mcp.formatters.csv import CSVFormatter
from nlsql_mcp.formatters.json import JSONFormatter
from nlsql_mcp.formatters.table import TableFormatter

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TableFormatter",
    "registry",
]
