"""
PostgreSQL-backed recording store.

Executes compiled filter predicates against the recordings table through a
psycopg `ConnectionPool` and inserts single rows with positional parameters.
Table and column identifiers are composed with `psycopg.sql` so only values
ever travel as parameters.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from callarchive.config import get_settings
from callarchive.infrastructure.db_factory import apply_statement_timeout, create_pool
from callarchive.query.filters import ORDER_BY, CompiledQuery
from callarchive.storage.abstract import AbstractRecordingStore
from callarchive.utils.logging import get_logger

log = get_logger(__name__)


class PostgresRecordingStore(AbstractRecordingStore):
    """
    Recording store over a single flat Postgres table.

    The pool may be injected; otherwise one is created lazily from settings (or
    `dsn_override`) and closed by `close()`. An injected pool is left open.
    """

    name: str = "postgres"

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        table: Optional[str] = None,
        statement_timeout_ms: Optional[int] = None,
        dsn_override: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.table = table or settings.recordings_table
        self.statement_timeout_ms = (
            settings.db_statement_timeout_ms
            if statement_timeout_ms is None
            else statement_timeout_ms
        )
        self._dsn_override = dsn_override
        self._pool_instance = pool
        self._owns_pool = pool is None

    def _get_pool(self) -> ConnectionPool:
        if self._pool_instance is None:
            self._pool_instance = create_pool(dsn=self._dsn_override)
        return self._pool_instance

    @property
    def _table_identifier(self) -> sql.Identifier:
        return sql.Identifier(*self.table.split("."))

    def select_statement(
        self, query: CompiledQuery, limit: Optional[int] = None
    ) -> Tuple[sql.Composed, List[Any]]:
        """Compose the full SELECT for a compiled query, with its parameters."""
        statement = sql.SQL("SELECT * FROM {table} WHERE {predicate} ORDER BY {order_by}").format(
            table=self._table_identifier,
            predicate=sql.SQL(query.predicate),
            order_by=sql.SQL(ORDER_BY),
        )
        params = query.params
        if limit is not None:
            statement += sql.SQL(" LIMIT %s")
            params.append(limit)
        return statement, params

    def insert_statement(self, row: Mapping[str, Any]) -> Tuple[sql.Composed, List[Any]]:
        """Compose a single-row INSERT covering exactly the row's columns."""
        columns = list(row)
        statement = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values})").format(
            table=self._table_identifier,
            columns=sql.SQL(", ").join(sql.Identifier(column) for column in columns),
            values=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        return statement, [row[column] for column in columns]

    def fetch(self, query: CompiledQuery, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        statement, params = self.select_statement(query, limit)
        with self._get_pool().connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                apply_statement_timeout(cur, self.statement_timeout_ms)
                cur.execute(statement, params)
                rows = cur.fetchall()
        log.debug("Fetched rows", extra={"table": self.table, "rows": len(rows)})
        return rows

    def insert(self, row: Mapping[str, Any]) -> None:
        statement, params = self.insert_statement(row)
        # The pooled connection commits on clean exit and rolls back on error.
        with self._get_pool().connection() as conn:
            with conn.cursor() as cur:
                apply_statement_timeout(cur, self.statement_timeout_ms)
                cur.execute(statement, params)
        log.debug("Inserted row", extra={"table": self.table})

    def close(self) -> None:
        if self._owns_pool and self._pool_instance is not None:
            try:
                self._pool_instance.close()
            finally:
                self._pool_instance = None


__all__ = ["PostgresRecordingStore"]
