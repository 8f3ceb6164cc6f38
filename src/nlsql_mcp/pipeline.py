"""The nl_query pipeline: schema, generation, validation, execution, rendering.

Every failure is converted into a plain-text reply beginning with
``Error:`` or ``SQL Error:``; nothing propagates to the transport.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import sentry_sdk
import structlog

from nlsql_mcp.cli.output import OutputFormat, get_formatter, render, resolve_format
from nlsql_mcp.core.client import PgClient
from nlsql_mcp.core.exceptions import ConfigMissingError, NlQueryError
from nlsql_mcp.core.generator import SqlGenerator
from nlsql_mcp.core.schema import get_schema
from nlsql_mcp.core.validator import validate_select

if TYPE_CHECKING:
    from collections.abc import Callable

    from nlsql_mcp.core.config import Settings


class NlQueryService:
    """Runs one natural-language query per call. Holds no per-call state."""

    def __init__(
        self,
        settings: Settings,
        *,
        generator: SqlGenerator | None = None,
        client_factory: Callable[..., Any] = PgClient,
    ) -> None:
        self.settings = settings
        self.generator = generator or SqlGenerator(
            settings.anthropic_api_key,
            model=settings.model,
            max_tokens=settings.max_tokens,
        )
        self._client_factory = client_factory

    async def run(self, prompt: str, output_format: str | None = "formatted") -> str:
        """Answer ``prompt`` and return the reply text."""
        log = structlog.get_logger()
        with structlog.contextvars.bound_contextvars(
            request_id=uuid.uuid4().hex[:8],
        ):
            try:
                return await self._run(prompt, output_format)
            except NlQueryError as e:
                log.warning("nl_query failed", kind=type(e).__name__, error=e.message)
                return e.reply()
            except Exception as e:
                log.exception("nl_query unexpected failure")
                sentry_sdk.capture_exception(e)
                return f"Error: {e}"

    async def _run(self, prompt: str, output_format: str | None) -> str:
        log = structlog.get_logger()
        settings = self.settings
        fmt = resolve_format(output_format)
        log.info("nl_query", output_format=fmt.value, prompt_length=len(prompt))

        if not settings.anthropic_api_key:
            raise ConfigMissingError(
                "AnthropicApiKey not found in configuration "
                "(set ANTHROPIC_API_KEY or anthropic_api_key in the config file)"
            )

        schema = get_schema(
            settings.models_dir,
            settings.schema_pattern,
            settings.schema_exclude_suffix,
        )
        log.debug("schema loaded", size=len(schema))

        sql = await self.generator.generate_sql(schema, prompt)
        validate_select(sql)

        if fmt is OutputFormat.QUERY_ONLY:
            return sql

        formatter = get_formatter(fmt)
        async with self._client_factory(
            settings.connection_string,
            timeout=settings.command_timeout,
            max_rows=settings.max_rows,
            connect_timeout=settings.connect_timeout,
        ) as client:
            result = await client.execute_query(sql)

        text = render(formatter, result)
        if settings.echo_query and fmt is OutputFormat.FORMATTED:
            text = f"Query: {sql}\n\n{text}"
        log.info("nl_query complete", row_count=result.row_count)
        return text
