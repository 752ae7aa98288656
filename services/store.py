"""Observable in-memory snapshot of the user's tasks.

Every page-level consumer subscribes here instead of listening for a global
"task updated" broadcast. Subscribers are called synchronously, in
subscription order, with a copy of the new snapshot.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, List, Optional

from core.log import get_logger
from models.task import Task
from services.views import TaskFilter, ViewKind, derive

Listener = Callable[[List[Task]], None]


class TaskStore:
    def __init__(self, tasks: Optional[Iterable[Task]] = None) -> None:
        self._tasks: List[Task] = list(tasks or [])
        self._listeners: List[Listener] = []
        self.logger = get_logger("store")

    # ---------- events ----------
    def subscribe(self, callback: Listener) -> Callable[[], None]:
        if callback not in self._listeners:
            self._listeners.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.snapshot)
            except Exception:
                self.logger.exception("Task store listener %r failed", listener)

    # ---------- state ----------
    @property
    def snapshot(self) -> List[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def replace(self, tasks: Iterable[Task]) -> None:
        self._tasks = list(tasks)
        self._emit()

    def upsert(self, task: Task) -> None:
        for idx, existing in enumerate(self._tasks):
            if existing.id == task.id:
                self._tasks[idx] = task
                break
        else:
            self._tasks.append(task)
        self._emit()

    def remove(self, task_id: str) -> Optional[Task]:
        task = self.get(task_id)
        if task is None:
            return None
        self._tasks = [t for t in self._tasks if t.id != task_id]
        self._emit()
        return task

    def restore(self, task: Task) -> None:
        """Put back a task removed optimistically. Position is not preserved."""
        if self.get(task.id) is None:
            self._tasks.append(task)
            self._emit()

    def view(
        self,
        kind: ViewKind | str,
        *,
        now: Optional[datetime] = None,
        task_filter: Optional[TaskFilter] = None,
    ):
        return derive(kind, self._tasks, now=now, task_filter=task_filter)


__all__ = ["Listener", "TaskStore"]
