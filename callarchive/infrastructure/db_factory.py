"""
Database connection factory utilities for the call recording archive.

Builds DSNs from settings and hands out psycopg connections and pools. Nothing
here is cached at module level: callers own the pool they create and pass it
(usually wrapped in a `PostgresRecordingStore`) to whoever needs it.

Includes retry logic for transient connection failures using tenacity. Query
execution itself is never retried.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from callarchive.config import Settings, get_settings
from callarchive.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    return (settings or get_settings()).dsn


def apply_statement_timeout(cursor: psycopg.Cursor, timeout_ms: Optional[int]) -> None:
    """
    Bound the running time of statements issued on this cursor's session.

    A falsy timeout leaves the server default in place.
    """
    if not timeout_ms:
        return
    cursor.execute(f"SET statement_timeout = {int(timeout_ms)}")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Use this for simple, one-off operations. Prefer a pool for repeated use.

    Parameters
    ----------
    dsn : str | None
        Connection string override. Defaults to the configured DSN.

    Returns
    -------
    Connection
        A new psycopg connection instance.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(psycopg.OperationalError),
    reraise=True,
)
def _wait_for_pool(pool: ConnectionPool, timeout: float) -> None:
    pool.wait(timeout=timeout)


def create_pool(
    dsn: Optional[str] = None,
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
    wait_timeout: Optional[float] = None,
) -> ConnectionPool:
    """
    Create and open a synchronous connection pool.

    Parameters
    ----------
    dsn : str | None
        Connection string override. Defaults to the configured DSN.
    min_size : int | None
        Minimum number of idle connections to keep. Defaults to settings.
    max_size : int | None
        Maximum total connections in the pool. Defaults to settings.
    wait_timeout : float | None
        If given, block until the pool holds `min_size` connections, retrying
        transient failures.

    Returns
    -------
    ConnectionPool
        An open pool. The caller is responsible for closing it.
    """
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=dsn or build_dsn(settings),
        min_size=min_size or settings.db_pool_min_size,
        max_size=max_size or settings.db_pool_max_size,
        open=True,
    )
    if wait_timeout is not None:
        try:
            _wait_for_pool(pool, wait_timeout)
        except Exception:
            pool.close()
            raise
    log.debug("Connection pool opened", extra={"min_size": pool.min_size, "max_size": pool.max_size})
    return pool


__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "create_pool",
    "get_sync_connection",
]
