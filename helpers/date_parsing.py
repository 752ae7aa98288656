"""Shared utilities for reading dates out of user input and task titles."""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple

from utils.datetime_utils import local_midnight, local_now, parse_rfc3339


@dataclass(frozen=True)
class DateMatch:
    """A due date found inside a title."""

    due: datetime
    matched: str
    cleaned_title: str


MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)
WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_MONTH = (
    r"(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?"
    r"|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
_ORDINAL = r"(?:st|nd|rd|th)?"

NUMERIC_RE = re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})")
MONTH_DAY_RE = re.compile(rf"\b{_MONTH}\s+(\d{{1,2}}){_ORDINAL}\b", re.IGNORECASE)
DAY_MONTH_RE = re.compile(rf"\b(\d{{1,2}}){_ORDINAL}\s+{_MONTH}\b", re.IGNORECASE)
RELATIVE_RE = re.compile(
    r"\b(tomorrow|next\s+week|next\s+month|next\s+(" + "|".join(WEEKDAY_NAMES) + r"))\b",
    re.IGNORECASE,
)
FILLER_RE = re.compile(r"\b(on|by|due|date)\b", re.IGNORECASE)
_RE_SPACES = re.compile(r"\s+")


def _month_index(name: str) -> Optional[int]:
    lowered = name.lower()
    for idx, full in enumerate(MONTH_NAMES, start=1):
        if lowered.startswith(full[:3]):
            return idx
    return None


def _expand_year(raw: str) -> int:
    year = int(raw)
    if len(raw) <= 2:
        year += 2000 if year < 50 else 1900
    return year


def add_months(value: datetime, months: int) -> datetime:
    """Shift ``value`` by whole calendar months, clamping the day of month."""

    total = value.month - 1 + months
    year = value.year + total // 12
    month = total % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _numeric(match: re.Match, now: datetime) -> Optional[datetime]:
    month, day = int(match.group(1)), int(match.group(2))
    if month > 12:
        month, day = day, month
    try:
        found = date(_expand_year(match.group(3)), month, day)
    except ValueError:
        return None
    return local_midnight(found, now.tzinfo)


def _named_month(month_name: str, raw_day: str, now: datetime) -> Optional[datetime]:
    month = _month_index(month_name)
    day = int(raw_day)
    if month is None or day <= 0:
        return None
    try:
        found = date(now.year, month, day)
        if found < now.date():
            found = date(now.year + 1, month, day)
    except ValueError:
        return None
    return local_midnight(found, now.tzinfo)


def _month_day(match: re.Match, now: datetime) -> Optional[datetime]:
    return _named_month(match.group(1), match.group(2), now)


def _day_month(match: re.Match, now: datetime) -> Optional[datetime]:
    return _named_month(match.group(2), match.group(1), now)


def _relative(match: re.Match, now: datetime) -> Optional[datetime]:
    phrase = _RE_SPACES.sub(" ", match.group(1).lower())
    if phrase == "tomorrow":
        return now + timedelta(days=1)
    if phrase == "next week":
        return now + timedelta(days=7)
    if phrase == "next month":
        return add_months(now, 1)
    weekday = WEEKDAY_NAMES.index(match.group(2).lower())
    ahead = (weekday - now.weekday()) % 7 or 7
    return now + timedelta(days=ahead)


_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match, datetime], Optional[datetime]]]] = [
    (NUMERIC_RE, _numeric),
    (MONTH_DAY_RE, _month_day),
    (DAY_MONTH_RE, _day_month),
    (RELATIVE_RE, _relative),
]


def strip_date_text(title: str, start: int, end: int) -> str:
    remainder = f"{title[:start]} {title[end:]}"
    remainder = FILLER_RE.sub(" ", remainder)
    return _RE_SPACES.sub(" ", remainder).strip()


def extract_due_date(title: str, now: Optional[datetime] = None) -> Optional[DateMatch]:
    """Find the first recognisable date in ``title``.

    Patterns are tried in order: numeric ``M/D/Y`` (swapped to ``D/M/Y`` when
    the first number cannot be a month), month name with day in either order,
    then relative phrases such as ``tomorrow`` or ``next friday``. A pattern
    that matches text but yields no valid date does not stop the search.
    """

    if not title:
        return None
    current = local_now(now)
    for pattern, resolve in _PATTERNS:
        match = pattern.search(title)
        if not match:
            continue
        due = resolve(match, current)
        if due is None:
            continue
        return DateMatch(
            due=due,
            matched=match.group(0),
            cleaned_title=strip_date_text(title, match.start(), match.end()),
        )
    return None


def parse_date_input(value: str | None) -> Optional[date]:
    """Parse ISO ``YYYY-MM-DD``, ``MM/DD/YYYY`` or ``DD.MM.YYYY`` into a ``date``."""

    if not value:
        return None
    text = value.strip()
    if not text:
        return None

    for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%d.%m.%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime_input(value: str | None, now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a full timestamp, or a bare date taken as local midnight."""

    if not value or not value.strip():
        return None
    day = parse_date_input(value)
    if day is not None:
        return local_midnight(day, local_now(now).tzinfo)
    return parse_rfc3339(value)


__all__ = [
    "DateMatch",
    "add_months",
    "extract_due_date",
    "parse_date_input",
    "parse_datetime_input",
    "strip_date_text",
]
