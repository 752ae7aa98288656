from __future__ import annotations

from typing import Optional


class TaskApiError(RuntimeError):
    """A task API call failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TaskNotFound(TaskApiError):
    pass


class ValidationError(TaskApiError):
    pass


__all__ = ["TaskApiError", "TaskNotFound", "ValidationError"]
