"""JSON formatter for QueryResult output."""

from __future__ import annotations

import json
import math
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from nlsql_mcp.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from nlsql_mcp.core.models import QueryResult


def _serialize_value(val: Any) -> Any:
    # NaN and Infinity have no JSON spelling.
    if isinstance(val, Decimal):
        if not val.is_finite():
            return None
        return int(val) if val == val.to_integral_value() else float(val)
    if isinstance(val, float) and not math.isfinite(val):
        return None
    if isinstance(val, (int, float, str, bool, type(None))):
        return val
    return str(val)


class JSONFormatter:
    def format(self, result: QueryResult) -> Iterator[str]:
        rows_as_dicts = [
            {
                name: _serialize_value(val)
                for name, val in zip(result.column_names, row, strict=True)
            }
            for row in result.rows
        ]
        yield json.dumps(rows_as_dicts, indent=2, allow_nan=False)


registry.register("json", JSONFormatter)
