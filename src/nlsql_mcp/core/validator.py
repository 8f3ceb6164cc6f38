"""Read-only guard for generated statements.

A textual prefix check: the statement must start with SELECT. It does
not parse SQL, so semicolon-chained statements and SELECT ... INTO pass.
"""

from __future__ import annotations

from nlsql_mcp.core.exceptions import RejectedStatementError


def is_select(sql: str) -> bool:
    return sql.lstrip()[:6].upper() == "SELECT"


def validate_select(sql: str) -> None:
    """Raise RejectedStatementError unless ``sql`` starts with SELECT."""
    if not is_select(sql):
        raise RejectedStatementError(f"Only SELECT queries allowed. Generated: {sql}")
