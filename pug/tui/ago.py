"""Human-friendly rendering of how long ago something happened."""

from __future__ import annotations

from datetime import datetime, timedelta

_TEN_SECONDS_US = 10_000_000


def _round_to_ten_seconds(diff: timedelta) -> int:
    """Round a positive duration to the nearest ten seconds, halves rounding up."""
    total_us = diff // timedelta(microseconds=1)
    blocks, remainder = divmod(total_us, _TEN_SECONDS_US)
    if remainder * 2 >= _TEN_SECONDS_US:
        blocks += 1
    return blocks * 10


def ago(now: datetime, then: datetime) -> str:
    """Describe the time between ``then`` and ``now``, e.g. ``"5m ago"``.

    Under ten seconds the exact number of seconds is given. Under a minute
    the seconds are rounded to blocks of ten, so that a table re-rendered
    every second does not flicker. Beyond that whole minutes, then whole
    hours, are given.
    """
    diff = now - then
    if diff < timedelta(seconds=10):
        n, suffix = int(diff.total_seconds()), "s"
    elif diff < timedelta(minutes=1):
        n, suffix = _round_to_ten_seconds(diff), "s"
    elif diff < timedelta(hours=1):
        n, suffix = int(diff.total_seconds() / 60), "m"
    else:
        n, suffix = int(diff.total_seconds() / 3600), "h"
    return f"{n}{suffix} ago"