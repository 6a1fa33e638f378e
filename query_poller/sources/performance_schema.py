"""
Row source backed by performance_schema.events_statements_history.

Each fetch selects the full column layout from the history table over one
long-lived connection. Two filters keep the output meaningful for a monitor:

- the poller's own connection is excluded, so polling does not report itself;
- a per-thread EVENT_ID high-water mark drops statements already returned by an
  earlier fetch (the history table keeps the last N statements per thread, so the
  same rows would otherwise come back on every poll).

Database errors are logged and reported as "no data" (None); the connection is
dropped and reopened on the next fetch.
"""

from __future__ import annotations

from types import TracebackType
from typing import Dict, List, Optional, Type

import pymysql
from pymysql.connections import Connection

from query_poller.domain.columns import HISTORY_TABLES, STATEMENT_COLUMNS
from query_poller.domain.models import RawRow
from query_poller.errors import ConfigurationError
from query_poller.infrastructure.db_factory import ConnectionFactory
from query_poller.sources.abstract import AbstractRowSource
from query_poller.utils.logging import get_logger

log = get_logger(__name__)

_OWN_THREAD_FILTER = (
    "THREAD_ID <> COALESCE(("
    "SELECT t.THREAD_ID FROM performance_schema.threads AS t "
    "WHERE t.PROCESSLIST_ID = CONNECTION_ID()), 0)"
)


def build_history_query(table: str, exclude_own_thread: bool = True) -> str:
    """
    Build the SELECT used to poll a statements history table.
    """
    if table not in HISTORY_TABLES:
        raise ConfigurationError(
            f"Unknown history table '{table}'. Available: {', '.join(HISTORY_TABLES)}"
        )
    conditions = ["END_EVENT_ID IS NOT NULL"]
    if exclude_own_thread:
        conditions.append(_OWN_THREAD_FILTER)
    return (
        f"SELECT {', '.join(STATEMENT_COLUMNS)} "
        f"FROM performance_schema.{table} "
        f"WHERE {' AND '.join(conditions)} "
        f"ORDER BY THREAD_ID, EVENT_ID"
    )


class PerformanceSchemaRowSource(AbstractRowSource):
    """
    Poll completed statements from performance_schema over PyMySQL.

    Parameters
    ----------
    connect : callable
        Zero-argument factory returning an open DB-API connection.
    table : str
        ``events_statements_history`` or ``events_statements_history_long``.
    exclude_own_thread : bool
        Skip statements issued by this source's own connection.
    skip_seen : bool
        Return each (THREAD_ID, EVENT_ID) at most once per source lifetime.
    """

    name = "performance_schema"

    def __init__(
        self,
        connect: ConnectionFactory,
        table: str = "events_statements_history",
        exclude_own_thread: bool = True,
        skip_seen: bool = True,
    ) -> None:
        self.sql = build_history_query(table, exclude_own_thread)
        self.table = table
        self.skip_seen = skip_seen
        self._connect = connect
        self._conn: Optional[Connection] = None
        self._high_water: Dict[int, int] = {}

    def _connection(self) -> Connection:
        if self._conn is None:
            self._conn = self._connect()
        return self._conn

    def _unseen(self, rows: List[RawRow]) -> List[RawRow]:
        fresh = [row for row in rows if row.event_id > self._high_water.get(row.thread_id, 0)]
        for row in fresh:
            if row.event_id > self._high_water.get(row.thread_id, 0):
                self._high_water[row.thread_id] = row.event_id
        # Thread ids are never reused: a thread with no rows left is gone for good.
        present = {row.thread_id for row in rows}
        for thread_id in [t for t in self._high_water if t not in present]:
            del self._high_water[thread_id]
        return fresh

    def fetch_rows(self) -> Optional[List[RawRow]]:
        try:
            conn = self._connection()
            with conn.cursor() as cur:
                cur.execute(self.sql)
                result = cur.fetchall()
        except pymysql.MySQLError as exc:
            log.warning(
                f"performance_schema poll failed: {exc}",
                extra={"table": self.table, "error": type(exc).__name__},
            )
            self.close()
            return None

        rows = [RawRow.from_row(row) for row in result]
        if self.skip_seen:
            rows = self._unseen(rows)
        return rows

    def close(self) -> None:
        """Close the underlying connection, if any."""
        if self._conn is None:
            return
        try:
            self._conn.close()
        except pymysql.MySQLError:
            pass  # Already closed by the server
        finally:
            self._conn = None

    def __enter__(self) -> "PerformanceSchemaRowSource":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


__all__ = ["PerformanceSchemaRowSource", "build_history_query"]
