# planner/models/task.py
import uuid
from typing import Optional, Tuple
from datetime import datetime

from sqlmodel import SQLModel, Field

from core.priorities import DEFAULT_PRIORITY
from core.recurrence import DEFAULT_RECURRENCE
from services.tags import parse_tags
from utils.datetime_utils import utc_now


DEFAULT_CATEGORY = "Default"


def new_task_id() -> str:
    return uuid.uuid4().hex


class Task(SQLModel, table=True):
    id: str = Field(default_factory=new_task_id, primary_key=True)
    owner: str = Field(default="", index=True)
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    completed: bool = False
    priority: str = DEFAULT_PRIORITY      # LOW / NORMAL / HIGH / URGENT
    recurrence: str = DEFAULT_RECURRENCE
    recurrence_end: Optional[datetime] = None
    estimated_minutes: Optional[int] = None
    reminder_time: Optional[datetime] = None
    tags: Optional[str] = None            # comma-joined, see services.tags
    category: Optional[str] = DEFAULT_CATEGORY
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def tag_list(self) -> Tuple[str, ...]:
        return parse_tags(self.tags)

    @property
    def is_categorized(self) -> bool:
        return bool(self.category) and self.category != DEFAULT_CATEGORY
