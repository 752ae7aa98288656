"""Utilities for working with RFC3339 timestamps, UTC and local calendar days.

Naive datetimes read back from storage are UTC, as everywhere else in the
planner. Calendar-day comparisons convert both sides into the timezone of
the reference ``now`` before truncating.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional, Union

UTC = timezone.utc


def parse_rfc3339(s: Optional[str]) -> Optional[datetime]:
    """Parse a RFC3339 string and return a timezone-aware UTC datetime."""

    if not s:
        return None

    value = s.strip()
    if not value:
        return None

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    if "." in value:
        head, tail = value.split(".", 1)
        if "+" in tail:
            frac, tz = tail.split("+", 1)
            sign = "+"
        elif "-" in tail:
            frac, tz = tail.split("-", 1)
            sign = "-"
        else:
            frac, tz = tail, "00:00"
            sign = "+"
        frac = (frac + "000000")[:6]
        value = f"{head}.{frac}{sign}{tz}"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_rfc3339_utc(dt: Optional[Union[datetime, str]]) -> Optional[str]:
    """Convert a datetime (or string) to RFC3339 in UTC with millisecond precision."""

    if dt is None:
        return None
    if isinstance(dt, str):
        dt = parse_rfc3339(dt)
    if dt is None:
        return None
    dt = ensure_utc(dt)
    millis = dt.microsecond // 1000
    return dt.replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def coerce_datetime(value: object, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Best-effort conversion of a stored or wire value to an aware datetime.

    Naive datetimes are UTC. A bare ``date`` is midnight in ``tz`` (the
    machine's local zone when ``tz`` is None). Anything that cannot be read
    as a timestamp is treated as absent.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return local_midnight(value, tz)
    if isinstance(value, str):
        return parse_rfc3339(value)
    return None


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def local_now(now: Optional[datetime] = None) -> datetime:
    """Return ``now`` as an aware datetime; naive input is read as local wall time."""

    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def to_local(dt: datetime, tz: Optional[tzinfo]) -> datetime:
    return ensure_utc(dt).astimezone(tz)


def local_day(dt: datetime, tz: Optional[tzinfo]) -> date:
    return to_local(dt, tz).date()


def local_midnight(d: date, tz: Optional[tzinfo]) -> datetime:
    if tz is None:
        return datetime.combine(d, time.min).astimezone()
    return datetime.combine(d, time.min, tzinfo=tz)


__all__ = [
    "UTC",
    "coerce_datetime",
    "ensure_utc",
    "local_day",
    "local_midnight",
    "local_now",
    "parse_rfc3339",
    "to_local",
    "to_rfc3339_utc",
    "utc_now",
]
