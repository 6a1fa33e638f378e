"""
Timestamp rendering shared by events and reports.
"""

from __future__ import annotations

import time
from typing import Union

Number = Union[int, float]

_MAX_MICROS = 999_999


def format_timestamp(unix_time: Number, gmt: bool = False) -> str:
    """
    Render a Unix timestamp as ``YYYY-MM-DDTHH:MM:SS[.ffffff]``.

    Local time is used unless ``gmt`` is true. Microseconds are appended only when
    the timestamp carries a fractional part.
    """
    whole = int(unix_time)
    parts = time.gmtime(whole) if gmt else time.localtime(whole)
    value = time.strftime("%Y-%m-%dT%H:%M:%S", parts)

    fraction = unix_time - whole
    if isinstance(unix_time, float) and fraction > 0:
        micros = min(int(round(fraction * 1_000_000)), _MAX_MICROS)
        value += f".{micros:06d}"
    return value


__all__ = ["format_timestamp"]
