from __future__ import annotations

import time

from query_poller.utils.timefmt import format_timestamp


def test_whole_seconds_have_no_fraction() -> None:
    assert format_timestamp(0, gmt=True) == "1970-01-01T00:00:00"
    assert format_timestamp(1_700_000_000, gmt=True) == "2023-11-14T22:13:20"
    assert format_timestamp(2.0, gmt=True) == "1970-01-01T00:00:02"


def test_fraction_is_rendered_as_microseconds() -> None:
    assert format_timestamp(1.5, gmt=True) == "1970-01-01T00:00:01.500000"
    assert format_timestamp(1_700_000_000.25, gmt=True) == "2023-11-14T22:13:20.250000"


def test_fraction_never_rolls_over_the_second() -> None:
    assert format_timestamp(59.9999999, gmt=True) == "1970-01-01T00:00:59.999999"


def test_local_time_is_the_default() -> None:
    stamp = 1_700_000_000
    expected = time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(stamp))
    assert format_timestamp(stamp) == expected
