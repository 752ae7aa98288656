"""Derived task views: inbox, today, upcoming, completed and ad hoc filters.

Every function here is pure. Tasks are read through attributes only, so the
SQLModel ``Task`` and any lookalike record work the same way. A due date
that is missing or cannot be read as a timestamp keeps the task out of
date-scoped views instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Union

from core.priorities import normalize_priority
from utils.datetime_utils import coerce_datetime, local_day, local_now


class ViewKind(str, Enum):
    INBOX = "inbox"
    TODAY = "today"
    UPCOMING = "upcoming"
    FILTERED = "filter"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TaskFilter:
    """Ad hoc predicates. ``None`` on any field means no constraint."""

    priority: Optional[str] = None
    due_after: Optional[datetime] = None
    due_before: Optional[datetime] = None
    completed: Optional[bool] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.priority is None
            and self.due_after is None
            and self.due_before is None
            and self.completed is None
        )

    def matches(self, task) -> bool:
        if self.completed is not None and bool(task.completed) != self.completed:
            return False
        if self.priority is not None and normalize_priority(task.priority) != normalize_priority(
            self.priority
        ):
            return False
        lower = coerce_datetime(self.due_after)
        upper = coerce_datetime(self.due_before)
        if lower is None and upper is None:
            return True
        due = due_of(task)
        if due is None:
            return False
        if lower is not None and due < lower:
            return False
        if upper is not None and due > upper:
            return False
        return True


@dataclass
class DayGroup:
    day: date
    tasks: List[object] = field(default_factory=list)


def due_of(task, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    return coerce_datetime(getattr(task, "due_date", None), tz)


def _open(tasks: Iterable[object]) -> List[object]:
    return [t for t in tasks if not t.completed]


def inbox(tasks: Iterable[object]) -> List[object]:
    return _open(tasks)


def completed(tasks: Iterable[object]) -> List[object]:
    return [t for t in tasks if t.completed]


def today(tasks: Iterable[object], now: Optional[datetime] = None) -> List[object]:
    current = local_now(now)
    tz = current.tzinfo
    result = []
    for task in _open(tasks):
        due = due_of(task, tz)
        if due is not None and local_day(due, tz) == current.date():
            result.append(task)
    return result


def upcoming(tasks: Iterable[object], now: Optional[datetime] = None) -> List[DayGroup]:
    """Open tasks due after ``now`` on a later local day, grouped by that day."""

    current = local_now(now)
    tz = current.tzinfo
    groups: Dict[date, DayGroup] = {}
    for task in _open(tasks):
        due = due_of(task, tz)
        if due is None or due <= current:
            continue
        day = local_day(due, tz)
        if day == current.date():
            continue
        groups.setdefault(day, DayGroup(day=day)).tasks.append(task)
    return [groups[day] for day in sorted(groups)]


def filtered(tasks: Iterable[object], task_filter: Optional[TaskFilter] = None) -> List[object]:
    if task_filter is None or task_filter.is_empty:
        return list(tasks)
    return [t for t in tasks if task_filter.matches(t)]


def flatten(groups: Sequence[DayGroup]) -> List[object]:
    return [task for group in groups for task in group.tasks]


def derive(
    kind: Union[ViewKind, str],
    tasks: Iterable[object],
    *,
    now: Optional[datetime] = None,
    task_filter: Optional[TaskFilter] = None,
) -> Union[List[object], List[DayGroup]]:
    view = ViewKind(kind)
    if view is ViewKind.INBOX:
        return inbox(tasks)
    if view is ViewKind.TODAY:
        return today(tasks, now)
    if view is ViewKind.UPCOMING:
        return upcoming(tasks, now)
    if view is ViewKind.COMPLETED:
        return completed(tasks)
    return filtered(tasks, task_filter)


__all__ = [
    "DayGroup",
    "TaskFilter",
    "ViewKind",
    "completed",
    "derive",
    "due_of",
    "filtered",
    "flatten",
    "inbox",
    "today",
    "upcoming",
]
