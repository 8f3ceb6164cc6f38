"""Plain-text table formatter for QueryResult output.

Pipe-separated columns under a dashed rule, followed by a row count::

    au_id | au_lname
    ------------------------------
    172-32-1176 | White

    (1 rows)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nlsql_mcp.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from nlsql_mcp.core.models import QueryResult

_SEPARATOR = " | "
_NULL = "NULL"


def _cell(value: Any) -> str:
    return _NULL if value is None else str(value)


class TableFormatter:
    def __init__(self, column_width: int = 15) -> None:
        self.column_width = column_width

    def format(self, result: QueryResult) -> Iterator[str]:
        yield _SEPARATOR.join(result.column_names)
        yield "-" * (self.column_width * len(result.columns))

        for row in result.rows:
            yield _SEPARATOR.join(_cell(v) for v in row)

        yield ""
        yield f"({result.row_count} rows)"


registry.register("table", TableFormatter)
