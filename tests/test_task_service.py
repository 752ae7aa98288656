from datetime import timedelta

import pytest

from core.priorities import URGENT
from models.draft import TaskDraft
from models.task import Task
from services.errors import TaskApiError, TaskNotFound
from services.inference import fixed_days_ahead, fixed_estimate
from services.local_api import SqlTaskApi
from services.store import TaskStore
from services.tasks import TaskService
from services.views import TaskFilter


class FakeTaskApi:
    def __init__(self, tasks=None):
        self.tasks = list(tasks or [])
        self.fail_on = set()
        self.calls = []

    def _maybe_fail(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise TaskApiError(f"{name} failed", status=500)

    def list(self, task_filter=None):
        self._maybe_fail("list")
        self.last_filter = task_filter
        return list(self.tasks)

    def create(self, draft):
        self._maybe_fail("create")
        task = Task(title=draft.title, **{k: v for k, v in draft.as_fields().items() if k not in ("title", "tags")})
        self.tasks.append(task)
        return task

    def update(self, task_id, **fields):
        self._maybe_fail("update")
        for idx, task in enumerate(self.tasks):
            if task.id == task_id:
                values = {name: getattr(task, name) for name in Task.model_fields}
                values.update(fields)
                self.tasks[idx] = Task(**values)
                return self.tasks[idx]
        raise TaskNotFound(f"Task {task_id} not found", status=404)

    def delete(self, task_id):
        self._maybe_fail("delete")
        self.tasks = [t for t in self.tasks if t.id != task_id]


class FakeDescriber:
    def suggest(self, title):
        return f"describe {title}"


@pytest.fixture()
def notes():
    return []


def _service(api, notes, **kwargs):
    return TaskService(api, TaskStore(), notify=lambda level, msg: notes.append((level, msg)), **kwargs)


def test_refresh_replaces_snapshot_and_remembers_filter(notes):
    api = FakeTaskApi([Task(title="a"), Task(title="b")])
    service = _service(api, notes)
    task_filter = TaskFilter(completed=False)

    assert service.refresh(task_filter) is True
    assert [t.title for t in service.store.snapshot] == ["a", "b"]

    service.refresh()
    assert api.last_filter is task_filter


def test_refresh_failure_keeps_snapshot_and_notifies(notes):
    api = FakeTaskApi([Task(title="a")])
    service = _service(api, notes)
    service.refresh()
    api.fail_on.add("list")

    assert service.refresh() is False
    assert [t.title for t in service.store.snapshot] == ["a"]
    assert notes == [("error", "Failed to fetch tasks: list failed")]


def test_create_notifies_and_refreshes(notes):
    api = FakeTaskApi()
    service = _service(api, notes)
    seen = []
    service.store.subscribe(seen.append)

    task = service.create(TaskDraft(title="Essay"))

    assert task.title == "Essay"
    assert notes == [("success", "Task created successfully")]
    assert [t.title for t in seen[-1]] == ["Essay"]
    assert api.calls == ["create", "list"]


def test_create_requires_title(notes):
    service = _service(FakeTaskApi(), notes)
    with pytest.raises(ValueError):
        service.create(TaskDraft(title="  "))


def test_create_failure_is_reported(notes):
    api = FakeTaskApi()
    api.fail_on.add("create")
    service = _service(api, notes)

    assert service.create(TaskDraft(title="Essay")) is None
    assert notes == [("error", "Failed to create task: create failed")]
    assert api.calls == ["create"]


def test_generate_uses_inference_policies(notes, now):
    api = FakeTaskApi()
    service = _service(
        api,
        notes,
        due_policy=fixed_days_ahead(3),
        estimate_policy=fixed_estimate(60),
    )

    task = service.generate("Urgent meeting prep", now=now)

    assert task.priority == URGENT
    assert task.category == "Meetings"
    assert task.due_date == now + timedelta(days=3)
    assert task.estimated_minutes == 60
    assert notes == [("success", 'Task "Urgent meeting prep" generated successfully!')]


def test_toggle_is_optimistic(notes):
    task = Task(title="a")
    api = FakeTaskApi([task])
    service = _service(api, notes)
    service.refresh()
    seen = []
    service.store.subscribe(lambda tasks: seen.append(tasks[0].completed))

    updated = service.toggle(task.id)

    assert updated.completed is True
    # optimistic flip first, then the refreshed snapshot
    assert seen[0] is True
    assert service.store.get(task.id).completed is True
    assert notes == [("success", "Task completed")]


def test_toggle_reverts_on_failure(notes):
    task = Task(title="a")
    api = FakeTaskApi([task])
    service = _service(api, notes)
    service.refresh()
    api.fail_on.add("update")
    seen = []
    service.store.subscribe(lambda tasks: seen.append(tasks[0].completed))

    assert service.toggle(task.id) is None
    assert seen == [True, False]
    assert service.store.get(task.id) is task
    assert notes == [("error", "Failed to update task: update failed")]


def test_toggle_unknown_task_is_a_no_op(notes):
    api = FakeTaskApi()
    service = _service(api, notes)
    assert service.toggle("missing") is None
    assert api.calls == []


def test_delete_restores_task_on_failure(notes):
    keep = Task(title="keep")
    doomed = Task(title="doomed")
    api = FakeTaskApi([keep, doomed])
    service = _service(api, notes)
    service.refresh()
    api.fail_on.add("delete")

    assert service.delete(doomed.id) is False
    assert {t.title for t in service.store.snapshot} == {"keep", "doomed"}
    assert notes == [("error", "Failed to delete task: delete failed")]


def test_delete_success(notes):
    doomed = Task(title="doomed")
    api = FakeTaskApi([doomed])
    service = _service(api, notes)
    service.refresh()

    assert service.delete(doomed.id) is True
    assert service.store.snapshot == []
    assert notes == [("success", "Task deleted successfully")]


def test_update_rejects_blank_title_and_reports_failures(notes):
    task = Task(title="a")
    api = FakeTaskApi([task])
    service = _service(api, notes)

    with pytest.raises(ValueError):
        service.update(task.id, title="")

    assert service.update("missing", completed=True) is None
    assert notes[-1][0] == "error"

    updated = service.update(task.id, title="b")
    assert updated.title == "b"
    assert notes[-1] == ("success", "Task updated successfully")


def test_describe_uses_describer(notes):
    service = _service(FakeTaskApi(), notes, describer=FakeDescriber())
    assert service.describe("Essay") == "describe Essay"


@pytest.mark.parametrize(
    "title, tags",
    [
        ("Buy milk, eggs, bread", "buy,milk,eggs"),
        ("Read https://docs.python.org/3/library/datetime.html", "read"),
    ],
)
def test_generate_stores_punctuated_titles(session_factory, notes, now, title, tags):
    api = SqlTaskApi("sam@uni.edu", session_factory=session_factory)
    service = _service(api, notes, due_policy=fixed_days_ahead(1), estimate_policy=fixed_estimate(30))

    task = service.generate(title, now=now)

    assert task is not None
    assert task.tags == tags
    assert [t.title for t in service.store.snapshot] == [title]
