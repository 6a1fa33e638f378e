"""
Configuration settings for the query poller.

Uses Pydantic Settings to load environment variables for the monitored MySQL
server, the poll interval, and logging. ``scheduler_config`` turns the relevant
fields into the scheduler's construction object.
"""
from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from query_poller.domain.columns import MIN_POLL_INTERVAL_US

if TYPE_CHECKING:
    from query_poller.scheduler import SchedulerConfig


class Settings(BaseSettings):
    # Monitored server
    mysql_host: str = Field("localhost", alias="MYSQL_HOST")
    mysql_port: int = Field(3306, alias="MYSQL_PORT")
    mysql_user: str = Field("root", alias="MYSQL_USER")
    mysql_password: str = Field("", alias="MYSQL_PASSWORD")
    mysql_database: str = Field("performance_schema", alias="MYSQL_DATABASE")
    mysql_connect_timeout: int = Field(10, alias="MYSQL_CONNECT_TIMEOUT")

    # Polling
    poll_interval_us: Optional[int] = Field(MIN_POLL_INTERVAL_US, alias="POLL_INTERVAL_US")
    history_table: str = Field("events_statements_history", alias="HISTORY_TABLE")
    exclude_own_thread: bool = Field(True, alias="EXCLUDE_OWN_THREAD")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    debug_trace: bool = Field(False, alias="DEBUG_TRACE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def scheduler_config(self, interval: Optional[int] = None) -> "SchedulerConfig":
        """
        Build the scheduler configuration, optionally overriding the interval.
        """
        from query_poller.scheduler import SchedulerConfig

        return SchedulerConfig(
            interval=interval if interval is not None else self.poll_interval_us,
            debug=self.debug_trace,
        )

    def describe(self) -> str:
        """One-line summary with the password masked."""
        password = "***" if self.mysql_password else "(none)"
        return (
            f"MySQL={self.mysql_user}:{password}@{self.mysql_host}:{self.mysql_port}"
            f"/{self.mysql_database} | table={self.history_table} "
            f"interval_us={self.poll_interval_us} exclude_self={self.exclude_own_thread}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
