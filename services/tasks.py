# planner/services/tasks.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from core.log import get_logger
from models.draft import TaskDraft
from models.task import Task
from services.description import DescriptionService
from services.errors import TaskApiError
from services.inference import DuePolicy, EstimatePolicy, infer_task
from services.store import TaskStore
from services.task_api import TaskApi
from services.views import TaskFilter

Notifier = Callable[[str, str], None]


def _clone(task: Task, **changes: Any) -> Task:
    values = {name: getattr(task, name) for name in Task.model_fields}
    values.update(changes)
    return Task(**values)


class TaskService:
    """Keeps a ``TaskStore`` in step with the task API.

    API failures never propagate: they are logged, reported through
    ``notify(level, message)`` and any optimistic change is rolled back.
    """

    def __init__(
        self,
        api: TaskApi,
        store: Optional[TaskStore] = None,
        *,
        notify: Optional[Notifier] = None,
        describer: Optional[DescriptionService] = None,
        due_policy: Optional[DuePolicy] = None,
        estimate_policy: Optional[EstimatePolicy] = None,
    ) -> None:
        self.api = api
        self.store = store or TaskStore()
        self.logger = get_logger("tasks")
        self._notify = notify or self._log_notification
        self._describer = describer
        self.due_policy = due_policy
        self.estimate_policy = estimate_policy
        self.task_filter: Optional[TaskFilter] = None

    def _log_notification(self, level: str, message: str) -> None:
        self.logger.info("[%s] %s", level, message)

    def _fail(self, action: str, exc: Exception) -> None:
        self.logger.error("%s: %s", action, exc)
        self._notify("error", f"{action}: {exc}")

    # ---------- reads ----------
    def refresh(self, task_filter: Optional[TaskFilter] = None) -> bool:
        if task_filter is not None:
            self.task_filter = task_filter
        try:
            tasks = self.api.list(self.task_filter)
        except TaskApiError as exc:
            self._fail("Failed to fetch tasks", exc)
            return False
        self.store.replace(tasks)
        return True

    # ---------- writes ----------
    def create(self, draft: TaskDraft, *, success_message: str = "Task created successfully") -> Optional[Task]:
        if not draft.title or not draft.title.strip():
            raise ValueError("Task title is required")
        try:
            task = self.api.create(draft)
        except TaskApiError as exc:
            self._fail("Failed to create task", exc)
            return None
        self._notify("success", success_message)
        self.refresh()
        return task

    def generate(self, title: str, *, now: Optional[datetime] = None) -> Optional[Task]:
        draft = infer_task(
            title,
            now=now,
            due_policy=self.due_policy,
            estimate_policy=self.estimate_policy,
        )
        return self.create(draft, success_message=f'Task "{draft.title}" generated successfully!')

    def update(self, task_id: str, **fields: Any) -> Optional[Task]:
        if "title" in fields and not (fields["title"] or "").strip():
            raise ValueError("Task title is required")
        try:
            task = self.api.update(task_id, **fields)
        except TaskApiError as exc:
            self._fail("Failed to update task", exc)
            return None
        self._notify("success", "Task updated successfully")
        self.refresh()
        return task

    def toggle(self, task_id: str) -> Optional[Task]:
        current = self.store.get(task_id)
        if current is None:
            return None
        self.store.upsert(_clone(current, completed=not current.completed))
        try:
            task = self.api.update(task_id, completed=not current.completed)
        except TaskApiError as exc:
            self.store.upsert(current)
            self._fail("Failed to update task", exc)
            return None
        self._notify("success", f"Task {'completed' if task.completed else 'reopened'}")
        self.refresh()
        return task

    def delete(self, task_id: str) -> bool:
        removed = self.store.remove(task_id)
        try:
            self.api.delete(task_id)
        except TaskApiError as exc:
            if removed is not None:
                self.store.restore(removed)
            self._fail("Failed to delete task", exc)
            return False
        self._notify("success", "Task deleted successfully")
        self.refresh()
        return True

    # ---------- suggestions ----------
    def describe(self, title: str) -> str:
        if self._describer is None:
            self._describer = DescriptionService()
        return self._describer.suggest(title)


__all__ = ["Notifier", "TaskService"]
