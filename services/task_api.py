"""Client side of the task CRUD API and its JSON wire format."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

import httpx

from core.log import get_logger
from core.priorities import normalize_priority
from core.recurrence import normalize_recurrence
from core.settings import API
from models.draft import TaskDraft
from models.task import Task
from services.errors import TaskApiError, TaskNotFound, ValidationError
from services.tags import TAG_DELIMITER, join_tags, parse_tags
from services.views import TaskFilter
from utils.datetime_utils import coerce_datetime, to_rfc3339_utc, utc_now


WIRE_NAMES: Dict[str, str] = {
    "due_date": "dueDate",
    "recurrence_end": "recurrenceEnd",
    "estimated_minutes": "estimatedMinutes",
    "reminder_time": "reminderTime",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
DATE_FIELDS = {"due_date", "recurrence_end", "reminder_time", "created_at", "updated_at"}
UPDATABLE_FIELDS = {
    "title",
    "description",
    "due_date",
    "completed",
    "priority",
    "recurrence",
    "recurrence_end",
    "estimated_minutes",
    "reminder_time",
    "tags",
    "category",
}


class TaskApi(Protocol):
    def list(self, task_filter: Optional[TaskFilter] = None) -> List[Task]: ...

    def create(self, draft: TaskDraft) -> Task: ...

    def update(self, task_id: str, **fields: Any) -> Task: ...

    def delete(self, task_id: str) -> None: ...


# ---------- wire codec ----------
def _wire_value(key: str, value: Any) -> Any:
    if value is None:
        return None
    if key in DATE_FIELDS:
        return to_rfc3339_utc(value if isinstance(value, (datetime, str)) else None)
    if key == "tags":
        return join_tags(value)
    if key == "priority":
        return normalize_priority(value)
    if key == "recurrence":
        return normalize_recurrence(value)
    return value


def fields_to_payload(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Serialize a partial field set; ``None`` stays ``null`` so it clears the field."""
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported task fields: {', '.join(sorted(unknown))}")
    return {WIRE_NAMES.get(key, key): _wire_value(key, value) for key, value in fields.items()}


def draft_to_payload(draft: TaskDraft) -> Dict[str, Any]:
    payload = fields_to_payload(draft.as_fields())
    return {key: value for key, value in payload.items() if value is not None}


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _inbound_tags(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = TAG_DELIMITER.join(str(item) for item in value)
    return TAG_DELIMITER.join(parse_tags(str(value))) or None


def task_from_payload(data: Mapping[str, Any]) -> Task:
    """Build a ``Task`` from its JSON form. Unreadable dates become ``None``."""

    def pick(key: str) -> Any:
        return data.get(WIRE_NAMES.get(key, key))

    return Task(
        id=str(data.get("id") or ""),
        owner=str(data.get("owner") or data.get("userEmail") or ""),
        title=str(data.get("title") or ""),
        description=data.get("description") or None,
        due_date=coerce_datetime(pick("due_date")),
        completed=bool(data.get("completed", False)),
        priority=normalize_priority(data.get("priority")),
        recurrence=normalize_recurrence(data.get("recurrence")),
        recurrence_end=coerce_datetime(pick("recurrence_end")),
        estimated_minutes=_optional_int(pick("estimated_minutes")),
        reminder_time=coerce_datetime(pick("reminder_time")),
        tags=_inbound_tags(data.get("tags")),
        category=data.get("category") or None,
        created_at=coerce_datetime(pick("created_at")) or utc_now(),
        updated_at=coerce_datetime(pick("updated_at")) or utc_now(),
    )


def task_to_payload(task: Task) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"id": task.id}
    for key in sorted(UPDATABLE_FIELDS | {"created_at", "updated_at"}):
        value = getattr(task, key)
        payload[WIRE_NAMES.get(key, key)] = _wire_value(key, value)
    return payload


def filter_to_params(task_filter: Optional[TaskFilter]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if task_filter is None:
        return params
    if task_filter.priority is not None:
        params["priority"] = normalize_priority(task_filter.priority)
    if task_filter.due_before is not None:
        params["dueBefore"] = to_rfc3339_utc(task_filter.due_before)
    if task_filter.due_after is not None:
        params["dueAfter"] = to_rfc3339_utc(task_filter.due_after)
    if task_filter.completed is not None:
        params["completed"] = "true" if task_filter.completed else "false"
    return params


# ---------- HTTP client ----------
class HttpTaskApi:
    """Talks to ``/api/tasks`` on the planner web backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        tasks_path: Optional[str] = None,
    ) -> None:
        self.base_url = (base_url or API.base_url).rstrip("/")
        self.tasks_path = tasks_path or API.tasks_path
        self.client = client or httpx.Client(timeout=timeout or API.timeout_sec)
        self.logger = get_logger("api")

    def _url(self, task_id: Optional[str] = None) -> str:
        url = f"{self.base_url}{self.tasks_path}"
        return f"{url}/{task_id}" if task_id else url

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            self.logger.error("%s %s failed: %s", method, url, exc)
            raise TaskApiError(f"Task API unreachable: {exc}") from exc
        if response.is_success:
            return response
        message = _error_message(response)
        self.logger.warning("%s %s -> %s %s", method, url, response.status_code, message)
        if response.status_code == 404:
            raise TaskNotFound(message, status=404)
        if response.status_code in (400, 422):
            raise ValidationError(message, status=response.status_code)
        raise TaskApiError(message, status=response.status_code)

    def list(self, task_filter: Optional[TaskFilter] = None) -> List[Task]:
        response = self._request("GET", self._url(), params=filter_to_params(task_filter))
        body = _json(response)
        items: Iterable[Any] = body.get("tasks", []) if isinstance(body, dict) else body or []
        return [task_from_payload(item) for item in items if isinstance(item, dict)]

    def create(self, draft: TaskDraft) -> Task:
        if not (draft.title or "").strip():
            raise ValidationError("Title is required", status=400)
        response = self._request("POST", self._url(), json=draft_to_payload(draft))
        return task_from_payload(_unwrap(_json(response)))

    def update(self, task_id: str, **fields: Any) -> Task:
        response = self._request("PATCH", self._url(task_id), json=fields_to_payload(fields))
        return task_from_payload(_unwrap(_json(response)))

    def delete(self, task_id: str) -> None:
        self._request("DELETE", self._url(task_id))

    def close(self) -> None:
        self.client.close()


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise TaskApiError("Task API returned invalid JSON", status=response.status_code) from exc


def _unwrap(body: Any) -> Dict[str, Any]:
    if isinstance(body, dict) and isinstance(body.get("task"), dict):
        return body["task"]
    if isinstance(body, dict):
        return body
    raise TaskApiError("Task API returned an unexpected body")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Task API error {response.status_code}"


__all__ = [
    "HttpTaskApi",
    "TaskApi",
    "draft_to_payload",
    "fields_to_payload",
    "filter_to_params",
    "task_from_payload",
    "task_to_payload",
]
