from datetime import date, datetime, timedelta, timezone
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from helpers.date_parsing import parse_date_input, parse_datetime_input
from utils.datetime_utils import (
    UTC,
    coerce_datetime,
    local_day,
    local_midnight,
    parse_rfc3339,
    to_rfc3339_utc,
)

EST = timezone(timedelta(hours=-5))


def test_parse_rfc3339_variants():
    assert parse_rfc3339("2025-03-15T00:00:00.000Z") == datetime(2025, 3, 15, tzinfo=UTC)
    assert parse_rfc3339("2025-03-15T10:00:00.5+02:00") == datetime(
        2025, 3, 15, 8, 0, 0, 500000, tzinfo=UTC
    )
    assert parse_rfc3339("2025-03-15T10:00:00") == datetime(2025, 3, 15, 10, tzinfo=UTC)
    assert parse_rfc3339("yesterday-ish") is None
    assert parse_rfc3339("   ") is None


def test_to_rfc3339_utc_matches_browser_iso_strings():
    value = datetime(2025, 3, 14, 19, 0, 0, 123456, tzinfo=EST)
    assert to_rfc3339_utc(value) == "2025-03-15T00:00:00.123Z"
    assert to_rfc3339_utc(None) is None
    assert to_rfc3339_utc("garbage") is None


def test_coerce_datetime_fails_open():
    assert coerce_datetime(None) is None
    assert coerce_datetime("not a date") is None
    assert coerce_datetime(42) is None
    assert coerce_datetime(date(2025, 3, 15), UTC) == datetime(2025, 3, 15, tzinfo=UTC)
    # Naive values come from storage and are UTC
    assert coerce_datetime(datetime(2025, 3, 15, 3)).tzinfo is UTC


def test_local_day_crosses_utc_midnight():
    stored = datetime(2025, 3, 11, 3, 0)  # naive UTC
    assert local_day(stored, EST) == date(2025, 3, 10)
    assert local_day(stored, UTC) == date(2025, 3, 11)


def test_local_midnight_uses_given_zone():
    assert local_midnight(date(2025, 3, 15), EST) == datetime(2025, 3, 15, tzinfo=EST)


def test_parse_date_input_formats():
    assert parse_date_input("2025-12-01").isoformat() == "2025-12-01"
    assert parse_date_input("12/01/2025").isoformat() == "2025-12-01"
    assert parse_date_input("01.12.2025").isoformat() == "2025-12-01"
    assert parse_date_input("soon") is None
    assert parse_date_input("") is None


def test_parse_datetime_input_date_is_local_midnight():
    now = datetime(2025, 3, 10, 14, 30, tzinfo=EST)
    assert parse_datetime_input("2025-03-15", now) == datetime(2025, 3, 15, tzinfo=EST)
    assert parse_datetime_input("2025-03-15T12:00:00Z", now) == datetime(2025, 3, 15, 12, tzinfo=UTC)
    assert parse_datetime_input(None, now) is None


def test_bare_date_is_midnight_in_reference_zone():
    value = coerce_datetime(date(2025, 3, 10), EST)
    assert value == datetime(2025, 3, 10, tzinfo=EST)
    assert local_day(value, EST) == date(2025, 3, 10)
