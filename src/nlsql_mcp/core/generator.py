"""SQL generation through the Anthropic Messages API.

One request per natural-language prompt: no retries, no streaming, no
sampling controls beyond the output cap.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import sentry_sdk
import structlog
from anthropic import AsyncAnthropic

from nlsql_mcp.core.exceptions import ModelFailureError

if TYPE_CHECKING:
    from collections.abc import Callable

SYSTEM_PROMPT = """You are a PostgreSQL expert. Given the database schema and user request, generate ONLY a valid PostgreSQL SELECT query.
Output ONLY the SQL query, no explanations or markdown.
The schema shows entity classes. IMPORTANT: Convert PascalCase property names to snake_case for actual column names (e.g., AuId -> au_id, AuLname -> au_lname, AuFname -> au_fname, TitleId -> title_id).
Table names are lowercase (e.g., Authors -> authors, Titles -> titles).
Use proper PostgreSQL syntax."""

DEFAULT_MODEL = "claude-3-5-haiku-latest"
DEFAULT_MAX_TOKENS = 500


def build_user_message(schema: str, prompt: str) -> str:
    return (
        f"Database Schema:\n{schema}\n\n"
        f"User Request: {prompt}\n\n"
        "Generate the SQL query:"
    )


def first_text_block(content: list[Any]) -> str | None:
    """Return the text of the first text-bearing content block, if any."""
    for block in content:
        if getattr(block, "type", None) == "text":
            text = getattr(block, "text", None)
            if text is not None:
                return text
    return None


class SqlGenerator:
    """Translate a natural-language request into one SELECT statement."""

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client_factory: Callable[..., Any] = AsyncAnthropic,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client_factory = client_factory

    async def generate_sql(self, schema: str, prompt: str) -> str:
        """Ask the model for SQL and return the stripped statement text.

        Raises ModelFailureError when the key is missing, the API call
        fails for any reason, or the reply carries no text block.
        """
        log = structlog.get_logger()
        if not self.api_key:
            raise ModelFailureError("AnthropicApiKey not found in configuration")

        start_time = time.monotonic()
        with sentry_sdk.start_span(op="llm.generate", description=self.model) as span:
            try:
                async with self._client_factory(
                    api_key=self.api_key, max_retries=0
                ) as client:
                    response = await client.messages.create(
                        model=self.model,
                        max_tokens=self.max_tokens,
                        system=SYSTEM_PROMPT,
                        messages=[
                            {
                                "role": "user",
                                "content": build_user_message(schema, prompt),
                            }
                        ],
                    )
            except Exception as e:
                span.set_status("internal_error")
                log.error("sql generation failed", model=self.model, error=str(e))
                raise ModelFailureError(f"SQL generation failed: {e}") from e

            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("duration_ms", duration_ms)

        text = first_text_block(response.content)
        if text is None:
            log.warning("model reply has no text block", model=self.model)
            raise ModelFailureError("No text response from model")

        sql = text.strip()
        log.debug(
            "sql generated",
            model=self.model,
            duration_ms=f"{duration_ms:.1f}",
            sql=" ".join(sql.split()),
        )
        return sql
