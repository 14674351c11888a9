from __future__ import annotations

import time
from datetime import date, datetime, timezone

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MICRO = 1_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_nanos() -> int:
    return time.time_ns()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def datetime_to_nanos(dt: datetime) -> int:
    """Naive datetimes are taken as UTC (SQLite drops tzinfo on the way back)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * NANOS_PER_SECOND + delta.microseconds * NANOS_PER_MICRO


def nanos_to_datetime(ns: int) -> datetime:
    seconds, rem = divmod(ns, NANOS_PER_SECOND)
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(microsecond=rem // NANOS_PER_MICRO)


def date_to_nanos(d: date) -> int:
    return datetime_to_nanos(datetime(d.year, d.month, d.day, tzinfo=timezone.utc))
