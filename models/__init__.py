"""Data models exposed by the Planner application."""
from .task import DEFAULT_CATEGORY, Task
from .draft import TaskDraft

__all__ = ["DEFAULT_CATEGORY", "Task", "TaskDraft"]
