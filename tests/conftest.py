"""
Pytest configuration for the query poller.

Provides fixtures for:
- Deterministic time (a fake clock that records sleeps instead of sleeping)
- Statement history rows in the positional column layout
- A fake DB-API connection for the performance_schema source
- Live MySQL connection management for integration tests
"""

from __future__ import annotations

import os
from typing import Any, Callable, Generator, List, Optional, Sequence, Tuple

import pymysql
import pytest

from query_poller.config import Settings, get_settings
from query_poller.domain.columns import STATEMENT_COLUMNS

REFERENCE_TIME = 1_700_000_000.0


class FakeClock:
    """Clock whose time only moves when told to (or when slept on)."""

    def __init__(self, start: float = REFERENCE_TIME) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCursor:
    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._result: Sequence[Any] = ()

    def execute(self, sql: str) -> None:
        self._conn.executed.append(sql)
        if self._conn.errors:
            raise self._conn.errors.pop(0)
        self._result = self._conn.batches.pop(0) if self._conn.batches else ()

    def fetchall(self) -> Sequence[Any]:
        return self._result

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


class FakeConnection:
    """
    Minimal PyMySQL-like connection: each execute serves the next queued batch or
    raises the next queued error.
    """

    def __init__(
        self,
        batches: Optional[List[Sequence[Any]]] = None,
        errors: Optional[List[Exception]] = None,
    ) -> None:
        self.batches = list(batches or [])
        self.errors = list(errors or [])
        self.executed: List[str] = []
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True


def _make_row(**columns: Any) -> Tuple[Any, ...]:
    values = {name: 0 for name in STATEMENT_COLUMNS}
    values.update(
        {
            "THREAD_ID": 42,
            "EVENT_ID": 1,
            "END_EVENT_ID": 2,
            "EVENT_NAME": "statement/sql/select",
            "SOURCE": "init_net_server_extension.cc:95",
            "SQL_TEXT": "SELECT 1",
            "DIGEST": None,
            "DIGEST_TEXT": None,
            "CURRENT_SCHEMA": "app",
            "OBJECT_TYPE": None,
            "OBJECT_SCHEMA": None,
            "OBJECT_NAME": None,
            "OBJECT_INSTANCE_BEGIN": None,
            "RETURNED_SQLSTATE": None,
            "MESSAGE_TEXT": None,
            "NESTING_EVENT_ID": None,
            "NESTING_EVENT_TYPE": None,
        }
    )
    for name, value in columns.items():
        key = name.upper()
        if key not in values:
            raise KeyError(f"Unknown statement column {name}")
        values[key] = value
    return tuple(values[name] for name in STATEMENT_COLUMNS)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_row() -> Callable[..., Tuple[Any, ...]]:
    """
    Factory for positional statement rows; keyword arguments override columns.
    """
    return _make_row


@pytest.fixture
def fake_connection_cls() -> type:
    return FakeConnection


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture for integration tests, overridable via environment variables.
    """
    return Settings(
        MYSQL_HOST=os.getenv("MYSQL_HOST", "127.0.0.1"),
        MYSQL_PORT=int(os.getenv("MYSQL_PORT", "3306")),
        MYSQL_USER=os.getenv("MYSQL_USER", "root"),
        MYSQL_PASSWORD=os.getenv("MYSQL_PASSWORD", ""),
        MYSQL_CONNECT_TIMEOUT=5,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture(scope="session")
def mysql_available(test_settings: Settings) -> bool:
    """
    Check if a MySQL server with performance_schema is reachable.
    """
    try:
        conn = pymysql.connect(
            host=test_settings.mysql_host,
            port=test_settings.mysql_port,
            user=test_settings.mysql_user,
            password=test_settings.mysql_password,
            connect_timeout=5,
        )
    except pymysql.MySQLError:
        return False
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT @@performance_schema")
            (enabled,) = cur.fetchone()
        return bool(enabled)
    except pymysql.MySQLError:
        return False
    finally:
        conn.close()


@pytest.fixture
def mysql_connection(
    test_settings: Settings, mysql_available: bool
) -> Generator[pymysql.connections.Connection, None, None]:
    """
    Provide a workload connection for integration tests.

    Skips tests if the database is not available.
    """
    if not mysql_available:
        pytest.skip("MySQL with performance_schema not available for integration tests")

    conn = pymysql.connect(
        host=test_settings.mysql_host,
        port=test_settings.mysql_port,
        user=test_settings.mysql_user,
        password=test_settings.mysql_password,
        autocommit=True,
    )
    try:
        yield conn
    finally:
        conn.close()
