# planner/services/local_api.py
from __future__ import annotations

from typing import Any, Callable, List, Optional

from sqlmodel import Session, select

from core.log import get_logger
from core.priorities import normalize_priority
from core.recurrence import normalize_recurrence
from models.draft import TaskDraft
from models.task import DEFAULT_CATEGORY, Task
from services.errors import TaskNotFound, ValidationError
from services.tags import join_tags
from services.task_api import UPDATABLE_FIELDS
from services.views import TaskFilter
from utils.datetime_utils import coerce_datetime, ensure_utc, utc_now


_DATE_FIELDS = ("due_date", "recurrence_end", "reminder_time", "created_at", "updated_at")


def _default_session_factory() -> Session:
    from storage.db import get_session

    return get_session()


def _as_utc(task: Task) -> Task:
    # SQLite hands datetimes back without tzinfo; they were stored as UTC.
    for name in _DATE_FIELDS:
        value = getattr(task, name)
        if value is not None:
            setattr(task, name, ensure_utc(value))
    return task


class SqlTaskApi:
    """Task API backed by the local SQLite database, scoped to one owner."""

    def __init__(self, owner: str, *, session_factory: Optional[Callable[[], Session]] = None):
        if not owner or not owner.strip():
            raise ValueError("Task owner is required")
        self.owner = owner.strip()
        self.session_factory = session_factory or _default_session_factory
        self.logger = get_logger("local_api")

    def list(self, task_filter: Optional[TaskFilter] = None) -> List[Task]:
        with self.session_factory() as s:
            stmt = select(Task).where(Task.owner == self.owner)
            if task_filter is not None:
                if task_filter.priority is not None:
                    stmt = stmt.where(Task.priority == normalize_priority(task_filter.priority))
                if task_filter.completed is not None:
                    stmt = stmt.where(Task.completed == task_filter.completed)
                lower = coerce_datetime(task_filter.due_after)
                upper = coerce_datetime(task_filter.due_before)
                if lower is not None:
                    stmt = stmt.where(Task.due_date != None, Task.due_date >= lower)  # noqa: E711
                if upper is not None:
                    stmt = stmt.where(Task.due_date != None, Task.due_date <= upper)  # noqa: E711
            stmt = stmt.order_by(Task.created_at.asc())
            return [_as_utc(t) for t in s.exec(stmt)]

    def get(self, task_id: str) -> Optional[Task]:
        with self.session_factory() as s:
            task = s.get(Task, task_id)
            if not task or task.owner != self.owner:
                return None
            return _as_utc(task)

    def create(self, draft: TaskDraft) -> Task:
        title = (draft.title or "").strip()
        if not title:
            raise ValidationError("Title is required", status=400)
        with self.session_factory() as s:
            task = Task(
                owner=self.owner,
                title=title,
                description=draft.description or None,
                due_date=ensure_utc(draft.due_date),
                priority=normalize_priority(draft.priority),
                recurrence=normalize_recurrence(draft.recurrence),
                recurrence_end=ensure_utc(draft.recurrence_end),
                estimated_minutes=draft.estimated_minutes or None,
                reminder_time=ensure_utc(draft.reminder_time),
                tags=join_tags(draft.tags),
                category=draft.category or DEFAULT_CATEGORY,
            )
            s.add(task)
            s.commit()
            s.refresh(task)
            self.logger.debug("Task created: %s", task.id)
            return _as_utc(task)

    def update(self, task_id: str, **fields: Any) -> Task:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unsupported task fields: {', '.join(sorted(unknown))}")
        with self.session_factory() as s:
            task = s.get(Task, task_id)
            if not task or task.owner != self.owner:
                raise TaskNotFound(f"Task {task_id} not found", status=404)
            for key, value in fields.items():
                if key == "title":
                    value = (value or "").strip()
                    if not value:
                        raise ValidationError("Title is required", status=400)
                elif key == "priority":
                    value = normalize_priority(value)
                elif key == "recurrence":
                    value = normalize_recurrence(value)
                elif key == "tags":
                    value = join_tags(value)
                elif key == "completed":
                    value = bool(value)
                elif key in _DATE_FIELDS:
                    value = coerce_datetime(value)
                setattr(task, key, value)
            task.updated_at = utc_now()
            s.add(task)
            s.commit()
            s.refresh(task)
            self.logger.debug("Task updated: %s", task_id)
            return _as_utc(task)

    def delete(self, task_id: str) -> None:
        with self.session_factory() as s:
            task = s.get(Task, task_id)
            if not task or task.owner != self.owner:
                raise TaskNotFound(f"Task {task_id} not found", status=404)
            s.delete(task)
            s.commit()
            self.logger.debug("Task deleted: %s", task_id)


__all__ = ["SqlTaskApi"]
