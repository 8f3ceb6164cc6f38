"""Query result models for nlsql-mcp.

Pydantic models for representing query results and column metadata
returned by PgClient.execute_query().
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class ColumnMeta(BaseModel):
    """Metadata for a single result column."""

    name: str


class QueryResult(BaseModel):
    """Result of a SQL query execution, bounded to the row cap.

    ``None`` in a row is the null marker; formatters decide how to
    display it.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    columns: list[ColumnMeta]
    rows: list[tuple[Any, ...]]
    row_count: int
    truncated: bool = False

    @model_validator(mode="after")
    def check_row_widths(self) -> QueryResult:
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                msg = f"Row {index} has {len(row)} values, expected {width}"
                raise ValueError(msg)
        return self

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]
