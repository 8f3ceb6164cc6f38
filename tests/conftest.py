"""Shared test fixtures for nlsql-mcp."""

from pathlib import Path
from tempfile import TemporaryDirectory
from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from nlsql_mcp.cli.main import app
from nlsql_mcp.core.config import Settings

AUTHORS_CS = """namespace Pubs.Models;

public partial class Author
{
    public string AuId { get; set; } = null!;
    public string AuLname { get; set; } = null!;
    public string AuFname { get; set; } = null!;
    public string? State { get; set; }
}
"""

TITLES_CS = """namespace Pubs.Models;

public partial class Title
{
    public string TitleId { get; set; } = null!;
    public string Title1 { get; set; } = null!;
    public decimal? Price { get; set; }
}
"""

CONTEXT_CS = """namespace Pubs.Models;

public partial class PubsContext : DbContext
{
}
"""

_ENV_VARS = (
    "NLSQL_ANTHROPIC_API_KEY",
    "ANTHROPIC_API_KEY",
    "NLSQL_CONNECTION_STRING",
    "DATABASE_URL",
    "NLSQL_MODELS_DIR",
    "NLSQL_MODEL",
    "NLSQL_SENTRY_DSN",
    "NLSQL_ENVIRONMENT",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep the user's config file and environment out of every test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "nlsql_mcp.core.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.toml"
    )


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def models_dir(temp_dir):
    """Models directory with two entities and a database context file."""
    path = temp_dir / "Models"
    path.mkdir()
    (path / "Titles.cs").write_text(TITLES_CS)
    (path / "Authors.cs").write_text(AUTHORS_CS)
    (path / "PubsContext.cs").write_text(CONTEXT_CS)
    return path


@pytest.fixture
def settings(models_dir):
    return Settings(
        anthropic_api_key="sk-test",  # pragma: allowlist secret
        connection_string="postgresql://reader@localhost/pubs",
        models_dir=models_dir,
    )


class FakeMessages:
    def __init__(self, content=None, error=None):
        self.content = content if content is not None else []
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=self.content)


class FakeAnthropic:
    """Stands in for the AsyncAnthropic class: call it to get a client."""

    def __init__(self, content=None, error=None):
        self.messages = FakeMessages(content, error)
        self.init_kwargs: dict | None = None
        self.closed = False

    def __call__(self, **kwargs):
        self.init_kwargs = kwargs
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True


def text_block(text):
    return SimpleNamespace(type="text", text=text)


@pytest.fixture
def fake_anthropic():
    def make(text=None, content=None, error=None):
        if content is None and text is not None:
            content = [text_block(text)]
        return FakeAnthropic(content=content, error=error)

    return make


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.conn.cursor_closed = True

    async def execute(self, sql, params=None):
        self.conn.executed.append(sql)
        if sql.startswith("SET statement_timeout"):
            return
        if self.conn.error is not None:
            raise self.conn.error
        self.description = [SimpleNamespace(name=c) for c in self.conn.columns]

    async def stream(self, sql, params=None):
        await self.execute(sql, params)
        try:
            for row in self.conn.rows:
                self.conn.fetched += 1
                yield row
        finally:
            self.conn.stream_closed = True


class FakeConnection:
    def __init__(self, columns=(), rows=(), error=None):
        self.columns = list(columns)
        self.rows = list(rows)
        self.error = error
        self.executed: list[str] = []
        self.fetched = 0
        self.stream_closed = False
        self.closed = False
        self.cursor_closed = False

    def cursor(self):
        return FakeCursor(self)

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_pg(monkeypatch):
    """Patch psycopg's async connect to hand out a FakeConnection.

    Returns a recorder with ``configure(...)`` and the list of connections
    opened and the arguments they were opened with.
    """
    import psycopg

    state = SimpleNamespace(
        connections=[], connect_calls=[], connect_error=None, spec={}
    )

    def configure(columns=(), rows=(), error=None, connect_error=None):
        state.spec = {"columns": columns, "rows": rows, "error": error}
        state.connect_error = connect_error

    async def fake_connect(conninfo="", **kwargs):
        state.connect_calls.append((conninfo, kwargs))
        if state.connect_error is not None:
            raise state.connect_error
        conn = FakeConnection(**state.spec)
        state.connections.append(conn)
        return conn

    state.configure = configure
    monkeypatch.setattr(psycopg.AsyncConnection, "connect", fake_connect)
    return state
