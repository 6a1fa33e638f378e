"""
Database connection factory for the query poller.

Opens PyMySQL connections to the monitored server. Connection establishment is
retried for transient failures using tenacity; polls themselves are never retried
here (a failed poll is the scheduler's "no data" case).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import pymysql
from pymysql.connections import Connection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from query_poller.config import Settings, get_settings

ConnectionFactory = Callable[[], Connection]


def connection_kwargs(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Compose PyMySQL connect arguments from settings.

    Autocommit is on so every poll sees the current contents of performance_schema
    instead of a repeatable-read snapshot.
    """
    settings = settings or get_settings()
    return {
        "host": settings.mysql_host,
        "port": settings.mysql_port,
        "user": settings.mysql_user,
        "password": settings.mysql_password,
        "database": settings.mysql_database,
        "connect_timeout": settings.mysql_connect_timeout,
        "autocommit": True,
        "charset": "utf8mb4",
    }


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((pymysql.err.OperationalError, pymysql.err.InterfaceError)),
    reraise=True,
)
def get_connection(settings: Optional[Settings] = None) -> Connection:
    """
    Open a dedicated connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Raises
    ------
    pymysql.err.OperationalError
        If connection fails after all retry attempts.
    """
    return pymysql.connect(**connection_kwargs(settings))


def connection_factory(settings: Optional[Settings] = None) -> ConnectionFactory:
    """
    Return a zero-argument opener bound to ``settings`` for lazy (re)connects.
    """

    def _open() -> Connection:
        return get_connection(settings)

    return _open


__all__ = [
    "ConnectionFactory",
    "connection_kwargs",
    "get_connection",
    "connection_factory",
]
