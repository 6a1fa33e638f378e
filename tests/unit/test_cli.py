from __future__ import annotations

import json
import logging
from typing import Any, List

import pytest
from typer.testing import CliRunner

from query_poller import main

runner = CliRunner()


class _FakeSource:
    """Stands in for PerformanceSchemaRowSource; records how it was built."""

    instances: List["_FakeSource"] = []
    rows_template: List[Any] = []

    def __init__(self, connect: Any, table: str, exclude_own_thread: bool) -> None:
        self.table = table
        self.exclude_own_thread = exclude_own_thread
        self.closed = False
        self.rows = list(self.rows_template)
        _FakeSource.instances.append(self)

    def fetch_rows(self) -> List[Any]:
        return list(self.rows)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "_FakeSource":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


@pytest.fixture
def fake_source(monkeypatch, make_row):
    _FakeSource.instances.clear()
    monkeypatch.setattr(
        _FakeSource,
        "rows_template",
        [make_row(thread_id=1, sql_text="SELECT 1"), make_row(thread_id=2)],
    )
    monkeypatch.setattr(main, "PerformanceSchemaRowSource", _FakeSource)
    monkeypatch.setattr(main, "connection_factory", lambda settings: None)
    monkeypatch.delenv("POLL_INTERVAL_US", raising=False)
    monkeypatch.delenv("HISTORY_TABLE", raising=False)
    monkeypatch.delenv("EXCLUDE_OWN_THREAD", raising=False)
    return _FakeSource


@pytest.fixture(autouse=True)
def _restore_root_logging():
    # `watch` reconfigures the root logger against the runner's temporary streams.
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    yield
    root.handlers = saved_handlers
    root.setLevel(saved_level)


def _json_lines(output: str) -> List[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def test_info_masks_password(monkeypatch) -> None:
    monkeypatch.setenv("MYSQL_PASSWORD", "hunter2")
    result = runner.invoke(main.app, ["info"])
    assert result.exit_code == 0
    assert "hunter2" not in result.stdout
    assert "MySQL=" in result.stdout


def test_watch_streams_json_events(fake_source) -> None:
    result = runner.invoke(main.app, ["watch", "--limit", "2"])

    assert result.exit_code == 0, result.output
    events = _json_lines(result.stdout)
    assert [e["Thread_id"] for e in events] == [1, 2]
    assert events[0]["arg"] == "SELECT 1"
    source = fake_source.instances[0]
    assert source.table == "events_statements_history"
    assert source.exclude_own_thread is True
    assert source.closed is True


def test_watch_slowlog_and_source_options(fake_source) -> None:
    result = runner.invoke(
        main.app,
        ["watch", "--limit", "1", "--format", "slowlog", "--long-history", "--include-self"],
    )

    assert result.exit_code == 0, result.output
    assert "# Thread_id: 1" in result.stdout
    source = fake_source.instances[0]
    assert source.table == "events_statements_history_long"
    assert source.exclude_own_thread is False


def test_watch_table_format(fake_source) -> None:
    result = runner.invoke(main.app, ["watch", "--limit", "2", "--format", "table"])
    assert result.exit_code == 0, result.output
    assert "Completed statements" in result.stdout


def test_watch_rejects_sub_second_interval(fake_source) -> None:
    result = runner.invoke(main.app, ["watch", "--interval", "500000", "--limit", "1"])
    assert result.exit_code == 2
    assert fake_source.instances == []
