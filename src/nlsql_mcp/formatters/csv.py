"""CSV formatter for QueryResult output (RFC 4180 compliant)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from nlsql_mcp.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from nlsql_mcp.core.models import QueryResult


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(values)
    return buf.getvalue().removesuffix("\n")


class CSVFormatter:
    def format(self, result: QueryResult) -> Iterator[str]:
        yield _write_row(result.column_names)

        for row in result.rows:
            yield _write_row([str(v) if v is not None else "" for v in row])


registry.register("csv", CSVFormatter)
