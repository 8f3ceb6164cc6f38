"""nlsql-mcp main entry point and command registration."""

from __future__ import annotations

import asyncio
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from nlsql_mcp.__about__ import __version__
from nlsql_mcp.core.config import SECRET_FIELDS, Settings, load_config, resolve_config
from nlsql_mcp.core.exceptions import NlQueryError
from nlsql_mcp.core.exit_codes import ExitCode
from nlsql_mcp.core.logging import get_logger, setup_logging
from nlsql_mcp.core.monitoring import setup_sentry
from nlsql_mcp.core.schema import get_schema

app = typer.Typer(
    help="nlsql-mcp - natural-language SQL queries over MCP",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management commands")
app.add_typer(config_app, name="config")

_ERROR_PREFIXES = ("Error:", "SQL Error:")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nlsql-mcp {__version__}")
        raise typer.Exit()


def get_settings(ctx: typer.Context) -> Settings:
    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        file_config = load_config(obj.get("config_file"))
        obj["settings"] = resolve_config(file_config, models_dir=obj.get("models_dir"))
    return obj["settings"]


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    models_dir: Annotated[
        Path | None,
        typer.Option("--models-dir", "-m", help="Directory of entity model files"),
    ] = None,
) -> None:
    """nlsql-mcp - natural-language SQL queries over MCP."""
    setup_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_file"] = config_file
    ctx.obj["models_dir"] = models_dir

    settings = get_settings(ctx)
    if setup_sentry(settings.sentry_dsn, settings.environment):
        get_logger().debug("sentry enabled", environment=settings.environment)


@app.command("serve")
def serve_command(ctx: typer.Context) -> None:
    """Run the MCP server on stdio."""
    from nlsql_mcp.server import serve

    settings = get_settings(ctx)
    get_logger().info("starting mcp server", version=__version__)
    serve(settings)


@app.command("ask")
def ask_command(
    ctx: typer.Context,
    prompt: Annotated[str, typer.Argument(help="Natural-language request")],
    format: Annotated[
        str,
        typer.Option(
            "--format", "-f", help="Output format: formatted|query_only|csv|json"
        ),
    ] = "formatted",
) -> None:
    """Run one natural-language query and print the reply."""
    from nlsql_mcp.pipeline import NlQueryService

    service = NlQueryService(get_settings(ctx))
    reply = asyncio.run(service.run(prompt, format))
    if reply.startswith(_ERROR_PREFIXES):
        typer.echo(reply, err=True)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    typer.echo(reply, nl=not reply.endswith("\n"))


@app.command("schema")
def schema_command(ctx: typer.Context) -> None:
    """Print the schema document sent to the model."""
    settings = get_settings(ctx)
    schema = get_schema(
        settings.models_dir,
        settings.schema_pattern,
        settings.schema_exclude_suffix,
    )
    typer.echo(schema, nl=False)


def _mask(key: str, value: object) -> str:
    if value is None:
        return "not set"
    if key in SECRET_FIELDS:
        return "***"
    return str(value)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Display resolved configuration with source attribution."""
    settings = get_settings(ctx)
    config_path = ctx.obj.get("config_file")

    typer.echo("Settings (resolved):")
    for key in Settings.model_fields:
        if key == "sources":
            continue
        value = _mask(key, getattr(settings, key))
        source = settings.sources.get(key, "default")
        typer.echo(f"  {key:<22} {value:<30} ({source})")

    if config_path is not None:
        typer.echo(f"\nConfig file: {config_path}")


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except NlQueryError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(e.reply(), err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
