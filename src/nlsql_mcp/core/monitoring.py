"""Sentry integration for error tracking and performance monitoring.

Sentry is only initialized when a DSN is configured; without one the
spans opened around generation and query execution are no-ops.
"""

import sentry_sdk

from nlsql_mcp.__about__ import __version__


def setup_sentry(dsn: str | None, environment: str = "local") -> bool:
    """Initialize Sentry when a DSN is configured. Returns True if enabled."""
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
