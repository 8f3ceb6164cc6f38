"""PostgreSQL client for nlsql-mcp.

Wraps a psycopg v3 async connection with query execution, statement
timeout, the row cap, and exception mapping to the NlQueryError
hierarchy.
"""

from __future__ import annotations

import time
from contextlib import aclosing
from typing import Any

import psycopg
import psycopg.errors
import sentry_sdk
import structlog

from nlsql_mcp.core.exceptions import (
    ConfigMissingError,
    DatabaseError,
    QueryTimeoutError,
)
from nlsql_mcp.core.models import ColumnMeta, QueryResult

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_ROWS = 100


def _columns(cur: psycopg.AsyncCursor[Any]) -> list[ColumnMeta]:
    return [ColumnMeta(name=d.name) for d in cur.description or ()]


class PgClient:
    """Async PostgreSQL client using psycopg v3.

    Meant to be used for a single invocation::

        async with PgClient(dsn) as client:
            result = await client.execute_query(sql)
    """

    def __init__(
        self,
        connection_string: str | None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_rows: int = DEFAULT_MAX_ROWS,
        connect_timeout: int = 10,
    ) -> None:
        self.connection_string = connection_string
        self.timeout = timeout
        self.max_rows = max_rows
        self.connect_timeout = connect_timeout
        self._connection: psycopg.AsyncConnection[Any] | None = None

    async def __aenter__(self) -> PgClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _connect(self) -> psycopg.AsyncConnection[Any]:
        if self._connection is not None and not self._connection.closed:
            return self._connection

        if not self.connection_string:
            raise ConfigMissingError(
                "ConnectionString not found in configuration "
                "(set NLSQL_CONNECTION_STRING or connection_string in the config file)"
            )

        try:
            self._connection = await psycopg.AsyncConnection.connect(
                self.connection_string,
                autocommit=True,
                connect_timeout=self.connect_timeout,
            )
        except psycopg.Error as e:
            raise DatabaseError(f"Connection failed: {e}") from e

        return self._connection

    async def execute_query(self, sql: str) -> QueryResult:
        """Execute ``sql`` verbatim and return at most ``max_rows`` rows."""
        log = structlog.get_logger()
        conn = await self._connect()
        timeout_ms = int(self.timeout * 1000)

        sql_normalized = " ".join(sql.split())
        log.debug("executing query", sql=sql_normalized)
        with sentry_sdk.start_span(
            op="db.query", description=sql_normalized[:100]
        ) as span:
            start_time = time.monotonic()
            try:
                async with conn.cursor() as cur:
                    await cur.execute(f"SET statement_timeout = {timeout_ms}")

                    columns: list[ColumnMeta] | None = None
                    rows: list[tuple[Any, ...]] = []
                    truncated = False

                    # Rows arrive one at a time; leaving the stream early
                    # cancels the rest of the result on the server.
                    async with aclosing(cur.stream(sql)) as stream:
                        async for row in stream:
                            if columns is None:
                                columns = _columns(cur)
                            if len(rows) == self.max_rows:
                                truncated = True
                                break
                            rows.append(row)

                    if columns is None:
                        columns = _columns(cur)

            except psycopg.errors.QueryCanceled as e:
                span.set_status("deadline_exceeded")
                log.error("query timeout", sql=sql_normalized, timeout=self.timeout)
                msg = f"Query timed out after {self.timeout}s: {e}"
                raise QueryTimeoutError(msg) from e
            except psycopg.Error as e:
                span.set_status("internal_error")
                log.error("database error", sql=sql_normalized, error=str(e))
                raise DatabaseError(str(e)) from e

            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("row_count", len(rows))
            span.set_data("duration_ms", duration_ms)
            log.debug(
                "query complete",
                duration_ms=f"{duration_ms:.1f}",
                row_count=len(rows),
                truncated=truncated,
            )

        return QueryResult(
            columns=columns,
            rows=[tuple(row) for row in rows],
            row_count=len(rows),
            truncated=truncated,
        )

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
