from __future__ import annotations

import sys
from enum import Enum
from typing import List, Optional

import typer

from query_poller.config import get_settings
from query_poller.domain.models import QueryEvent
from query_poller.errors import ConfigurationError
from query_poller.infrastructure.db_factory import connection_factory
from query_poller.reporter import format_json_line, format_slowlog, print_events
from query_poller.scheduler import PollScheduler
from query_poller.sources.performance_schema import PerformanceSchemaRowSource
from query_poller.utils.logging import configure_logging, get_logger
from query_poller.watcher import stream_events

app = typer.Typer(help="Poll performance_schema for completed statements.")
log = get_logger(__name__)


class OutputFormat(str, Enum):
    json = "json"
    slowlog = "slowlog"
    table = "table"


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    typer.echo(get_settings().describe())


@app.command()
def watch(
    interval: Optional[int] = typer.Option(
        None,
        "--interval",
        "-i",
        help="Microseconds between polls (minimum 1000000; default from settings).",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Stop after this many events.",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format for events.",
    ),
    long_history: bool = typer.Option(
        False,
        "--long-history",
        help="Poll events_statements_history_long instead of events_statements_history.",
    ),
    include_self: bool = typer.Option(
        False,
        "--include-self",
        help="Also report statements issued by the poller's own connection.",
    ),
    debug: bool = typer.Option(False, "--debug", help="Verbose per-poll tracing."),
) -> None:
    """
    Stream completed statements as events until interrupted (or --limit is reached).
    """
    settings = get_settings()
    configure_logging(level="DEBUG" if debug else settings.log_level, json_logs=settings.log_json)

    config = settings.scheduler_config(interval=interval)
    if debug:
        config = config.model_copy(update={"debug": True})
    try:
        scheduler = PollScheduler(config)
        source = PerformanceSchemaRowSource(
            connection_factory(settings),
            table="events_statements_history_long" if long_history else settings.history_table,
            exclude_own_thread=settings.exclude_own_thread and not include_self,
        )
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)

    log.info(f"Watching performance_schema.{source.table}", extra={"interval_us": config.interval})
    pending_table: List[QueryEvent] = []
    with source:
        for event in stream_events(scheduler, source, limit=limit):
            if output is OutputFormat.json:
                typer.echo(format_json_line(event))
            elif output is OutputFormat.slowlog:
                typer.echo(format_slowlog(event))
            else:
                pending_table.append(event)
                # One table per poll: flush once the cached batch is drained.
                if scheduler.pending == 0:
                    print_events(pending_table)
                    pending_table.clear()
    if pending_table:
        print_events(pending_table)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
