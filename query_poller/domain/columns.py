"""
Column layout of performance_schema.events_statements_history.

The order matches the table definition so positional rows (plain tuples from a
DB-API cursor) can be mapped onto names. Everything downstream reads fields by
name only.
"""

from __future__ import annotations

from typing import Tuple

STATEMENT_COLUMNS: Tuple[str, ...] = (
    "THREAD_ID",
    "EVENT_ID",
    "END_EVENT_ID",
    "EVENT_NAME",
    "SOURCE",
    "TIMER_START",
    "TIMER_END",
    "TIMER_WAIT",
    "LOCK_TIME",
    "SQL_TEXT",
    "DIGEST",
    "DIGEST_TEXT",
    "CURRENT_SCHEMA",
    "OBJECT_TYPE",
    "OBJECT_SCHEMA",
    "OBJECT_NAME",
    "OBJECT_INSTANCE_BEGIN",
    "MYSQL_ERRNO",
    "RETURNED_SQLSTATE",
    "MESSAGE_TEXT",
    "ERRORS",
    "WARNINGS",
    "ROWS_AFFECTED",
    "ROWS_SENT",
    "ROWS_EXAMINED",
    "CREATED_TMP_DISK_TABLES",
    "CREATED_TMP_TABLES",
    "SELECT_FULL_JOIN",
    "SELECT_FULL_RANGE_JOIN",
    "SELECT_RANGE",
    "SELECT_RANGE_CHECK",
    "SELECT_SCAN",
    "SORT_MERGE_PASSES",
    "SORT_RANGE",
    "SORT_ROWS",
    "SORT_SCAN",
    "NO_INDEX_USED",
    "NO_GOOD_INDEX_USED",
    "NESTING_EVENT_ID",
    "NESTING_EVENT_TYPE",
    "NESTING_EVENT_LEVEL",
)

# Timer columns are reported in picoseconds.
PICOSECONDS_PER_SECOND = 1_000_000_000_000
TIME_FIELD_DECIMALS = 6

# Hard floor for the poll interval, in microseconds.
MIN_POLL_INTERVAL_US = 1_000_000

# user/host are not exposed by the statements history table.
UNKNOWN_PLACEHOLDER = "unknown"

HISTORY_TABLES: Tuple[str, ...] = (
    "events_statements_history",
    "events_statements_history_long",
)


__all__ = [
    "STATEMENT_COLUMNS",
    "PICOSECONDS_PER_SECOND",
    "TIME_FIELD_DECIMALS",
    "MIN_POLL_INTERVAL_US",
    "UNKNOWN_PLACEHOLDER",
    "HISTORY_TABLES",
]
