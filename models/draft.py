"""Task payload before the API assigns an id and timestamps."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from core.priorities import DEFAULT_PRIORITY
from core.recurrence import DEFAULT_RECURRENCE


@dataclass
class TaskDraft:
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: str = DEFAULT_PRIORITY
    recurrence: str = DEFAULT_RECURRENCE
    recurrence_end: Optional[datetime] = None
    estimated_minutes: Optional[int] = None
    reminder_time: Optional[datetime] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    category: Optional[str] = None

    def as_fields(self) -> Dict[str, Any]:
        """Task fields only; subclasses may carry extra working data."""
        return {f.name: getattr(self, f.name) for f in fields(TaskDraft)}


__all__ = ["TaskDraft"]
