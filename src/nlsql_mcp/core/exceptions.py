"""Exception hierarchy for nlsql-mcp.

Every exception carries an exit_code for the CLI and a reply_prefix used
when the error is turned into the plain-text tool reply.
"""

from nlsql_mcp.core.exit_codes import ExitCode


class NlQueryError(Exception):
    """Base exception for all nlsql-mcp errors."""

    exit_code: int = ExitCode.GENERAL_ERROR
    reply_prefix: str = "Error:"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def reply(self) -> str:
        return f"{self.reply_prefix} {self.message}"


class ConfigError(NlQueryError):
    """Malformed config file, invalid setting."""

    exit_code: int = ExitCode.CONFIG_ERROR


class ConfigMissingError(ConfigError):
    """A required setting (API key, connection string) is absent."""


class SchemaUnavailableError(NlQueryError):
    """Models directory missing."""

    exit_code: int = ExitCode.INPUT_ERROR


class ModelFailureError(NlQueryError):
    """Model API call failed or returned no usable text."""

    exit_code: int = ExitCode.MODEL_ERROR


class RejectedStatementError(NlQueryError):
    """Generated statement is not a SELECT."""

    exit_code: int = ExitCode.INPUT_ERROR


class DatabaseError(NlQueryError):
    """Connection or execution failure reported by PostgreSQL."""

    exit_code: int = ExitCode.DATABASE_ERROR
    reply_prefix: str = "SQL Error:"


class QueryTimeoutError(DatabaseError):
    """Statement cancelled by the command timeout."""

    exit_code: int = ExitCode.TIMEOUT
