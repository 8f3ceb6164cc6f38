"""Configuration management for nlsql-mcp.

Handles the TOML config file, environment variables and configuration
precedence resolution. The resolved Settings object is frozen and is
passed explicitly to every component that needs it.

Precedence order (highest to lowest):
1. CLI flags
2. Environment variables (NLSQL_*, ANTHROPIC_API_KEY, DATABASE_URL)
3. Config file
4. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from nlsql_mcp.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "nlsql-mcp" / "config.toml"

# First variable present wins.
_ENV_VARS: dict[str, tuple[str, ...]] = {
    "anthropic_api_key": ("NLSQL_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    "connection_string": ("NLSQL_CONNECTION_STRING", "DATABASE_URL"),
    "models_dir": ("NLSQL_MODELS_DIR",),
    "model": ("NLSQL_MODEL",),
    "sentry_dsn": ("NLSQL_SENTRY_DSN",),
    "environment": ("NLSQL_ENVIRONMENT",),
}

SECRET_FIELDS = frozenset({"anthropic_api_key", "connection_string", "sentry_dsn"})


class FileConfig(BaseModel):
    """Contents of the TOML config file. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    anthropic_api_key: str | None = None
    connection_string: str | None = None
    models_dir: Path | None = None
    schema_pattern: str | None = None
    schema_exclude_suffix: str | None = None
    model: str | None = None
    max_tokens: int | None = None
    max_rows: int | None = None
    command_timeout: float | None = None
    connect_timeout: int | None = None
    echo_query: bool | None = None
    sentry_dsn: str | None = None
    environment: str | None = None


class Settings(BaseModel):
    """Resolved, immutable process configuration."""

    model_config = ConfigDict(frozen=True)

    anthropic_api_key: str | None = None
    connection_string: str | None = None
    models_dir: Path = Path("Models")
    schema_pattern: str = "*.cs"
    schema_exclude_suffix: str = "Context.cs"
    model: str = "claude-3-5-haiku-latest"
    max_tokens: int = 500
    max_rows: int = 100
    command_timeout: float = 30.0
    connect_timeout: int = 10
    echo_query: bool = False
    sentry_dsn: str | None = None
    environment: str = "local"
    sources: dict[str, str] = {}

    @field_validator("max_tokens", "max_rows", "connect_timeout")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v < 1:
            msg = f"Invalid value: {v}. Must be at least 1"
            raise ValueError(msg)
        return v

    @field_validator("command_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            msg = f"Invalid command_timeout: {v}. Must be positive"
            raise ValueError(msg)
        return v


def load_config(config_path: Path | None = None) -> FileConfig:
    """Load configuration from a TOML file.

    With no path the default location is used and a missing file yields an
    empty FileConfig. An explicitly given path must exist.
    Raises ConfigError on a missing explicit file, malformed TOML or
    invalid settings.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if explicit:
            msg = f"Config file not found: {config_path}"
            raise ConfigError(msg)
        return FileConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return FileConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: FileConfig | None = None,
    **cli_overrides: Any,
) -> Settings:
    """Resolve settings using the precedence chain.

    CLI > env > config file > built-in defaults.
    """
    if config is None:
        config = FileConfig()

    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    for key in Settings.model_fields:
        if key != "sources":
            sources[key] = "default"

    # Layer 2: Config file
    for key in config.model_fields_set:
        value = getattr(config, key)
        if value is not None:
            resolved[key] = value
            sources[key] = "config"

    # Layer 3: Environment variables
    for field_name, env_vars in _ENV_VARS.items():
        for env_var in env_vars:
            value = os.environ.get(env_var)
            if value:
                resolved[field_name] = value
                sources[field_name] = f"env: {env_var}"
                break

    # Layer 4: CLI flags (highest priority)
    for key, value in cli_overrides.items():
        if key not in sources:
            msg = f"Unknown setting: '{key}'"
            raise ConfigError(msg)
        if value is not None:
            resolved[key] = value
            sources[key] = f"cli: --{key.replace('_', '-')}"

    resolved["sources"] = sources
    try:
        return Settings(**resolved)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e
