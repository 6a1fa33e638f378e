from __future__ import annotations

import json
from typing import Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from query_poller.domain.models import QueryEvent

_SQL_PREVIEW_CHARS = 60


def _preview(sql: str, width: int = _SQL_PREVIEW_CHARS) -> str:
    flat = " ".join(sql.split())
    if len(flat) <= width:
        return flat
    return flat[: width - 1] + "…"


def event_row(event: QueryEvent) -> List[str]:
    """Cells for one event in the events table."""
    return [
        event.ts,
        str(event.thread_id),
        event.db or "",
        event.query_time,
        event.lock_time,
        f"{event.rows_examined:,}",
        f"{event.rows_sent:,}",
        event.tmp_table,
        event.filesort,
        _preview(event.arg),
    ]


def print_events(events: Iterable[QueryEvent], console: Optional[Console] = None) -> None:
    """
    Render events as a rich table.
    """
    console = console or Console()
    rows = [event_row(event) for event in events]

    if not rows:
        console.print("[yellow]No events to display.[/yellow]")
        return

    table = Table(title="Completed statements", box=box.ROUNDED)
    table.add_column("Time", style="cyan", no_wrap=True)
    table.add_column("Thread", justify="right", style="magenta")
    table.add_column("DB", style="blue")
    table.add_column("Query (s)", justify="right", style="bold green")
    table.add_column("Lock (s)", justify="right", style="green")
    table.add_column("Examined", justify="right", style="yellow")
    table.add_column("Sent", justify="right", style="yellow")
    table.add_column("Tmp", justify="center", style="red")
    table.add_column("Filesort", justify="center", style="red")
    table.add_column("SQL")

    for row in rows:
        table.add_row(*row)
    console.print(table)


def format_json_line(event: QueryEvent) -> str:
    """One JSON object per event, keyed with the event field names."""
    return json.dumps(event.to_dict(), sort_keys=True)


def format_slowlog(event: QueryEvent) -> str:
    """
    Render an event in slow query log layout.
    """
    lines = [
        f"# Time: {event.ts}",
        f"# User@Host: {event.user}[{event.user}] @ {event.host} []",
        f"# Thread_id: {event.thread_id}",
        f"# Query_time: {event.query_time}  Lock_time: {event.lock_time}  "
        f"Rows_sent: {event.rows_sent}  Rows_examined: {event.rows_examined}  "
        f"Rows_affected: {event.rows_affected}  Bytes: {event.byte_length}",
        f"# Full_scan: {event.full_scan}  Full_join: {event.full_join}  "
        f"Tmp_table: {event.tmp_table}  Tmp_table_on_disk: {event.tmp_table_on_disk}",
        f"# Filesort: {event.filesort}  Merge_passes: {event.merge_passes}",
    ]
    if event.db:
        lines.append(f"use {event.db};")
    sql = event.arg.rstrip()
    lines.append(sql if sql.endswith(";") else f"{sql};")
    return "\n".join(lines)


__all__ = ["event_row", "print_events", "format_json_line", "format_slowlog"]
