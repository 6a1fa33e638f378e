from __future__ import annotations

import itertools

from query_poller.scheduler import PollScheduler, SchedulerConfig
from query_poller.watcher import stream_events


def test_stops_after_limit(fake_clock, make_row) -> None:
    scheduler = PollScheduler(SchedulerConfig(interval=1_000_000), clock=fake_clock)
    batches = itertools.cycle([[make_row(thread_id=1), make_row(thread_id=2)]])

    events = list(stream_events(scheduler, lambda: next(batches), limit=3, clock=fake_clock))

    assert [e.thread_id for e in events] == [1, 2, 1]
    assert scheduler.polls == 2
    assert fake_clock.sleeps == [1.0]


def test_empty_polls_are_skipped(fake_clock, make_row) -> None:
    batches = iter([[], [], [make_row(thread_id=3)]])
    scheduler = PollScheduler(SchedulerConfig(interval=1_000_000), clock=fake_clock)

    events = list(stream_events(scheduler, lambda: next(batches), limit=1, clock=fake_clock))

    assert [e.thread_id for e in events] == [3]
    # Only the scheduler sleeps; empty polls are not failures.
    assert fake_clock.sleeps == [1.0, 1.0]


def test_backs_off_when_scheduler_would_retry_immediately(fake_clock, make_row) -> None:
    batches = iter([None, None, [make_row()]])
    scheduler = PollScheduler(SchedulerConfig(interval=2_000_000), clock=fake_clock)

    events = list(stream_events(scheduler, lambda: next(batches), limit=1, clock=fake_clock))

    assert len(events) == 1
    assert fake_clock.sleeps == [2.0, 2.0]
    assert scheduler.source_failures == 2


def test_no_extra_back_off_once_scheduler_paces_polls(fake_clock, make_row) -> None:
    batches = iter([[make_row()], None, [make_row()]])
    scheduler = PollScheduler(SchedulerConfig(interval=1_000_000), clock=fake_clock)

    events = list(stream_events(scheduler, lambda: next(batches), limit=2, clock=fake_clock))

    assert len(events) == 2
    # One scheduler sleep before the failed poll and one before the retry.
    assert fake_clock.sleeps == [1.0, 1.0]


def test_explicit_retry_delay_without_interval(fake_clock, make_row) -> None:
    batches = iter([None, [make_row()]])
    scheduler = PollScheduler(SchedulerConfig(interval=None), clock=fake_clock)

    list(
        stream_events(
            scheduler, lambda: next(batches), limit=1, retry_failed_after=0.5, clock=fake_clock
        )
    )

    assert fake_clock.sleeps == [0.5]
