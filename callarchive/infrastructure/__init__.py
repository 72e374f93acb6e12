"""
Infrastructure package for the call recording archive.

Centralizes database connectivity concerns (DSNs, connections, pooling).
Keep this layer focused on I/O and resource management, decoupled from
query compilation and service logic.
"""

from callarchive.infrastructure.db_factory import (
    apply_statement_timeout,
    build_dsn,
    create_pool,
    get_sync_connection,
)

__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "create_pool",
    "get_sync_connection",
]
