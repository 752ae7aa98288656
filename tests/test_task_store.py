from datetime import timedelta

from models.task import Task
from services.store import TaskStore
from services.views import ViewKind


def _task(title, **kwargs):
    return Task(title=title, **kwargs)


def test_subscribers_receive_snapshots_in_order():
    store = TaskStore()
    seen = []
    store.subscribe(lambda tasks: seen.append(("first", [t.title for t in tasks])))
    store.subscribe(lambda tasks: seen.append(("second", [t.title for t in tasks])))

    store.replace([_task("a"), _task("b")])

    assert seen == [("first", ["a", "b"]), ("second", ["a", "b"])]


def test_unsubscribe_stops_notifications():
    store = TaskStore()
    calls = []
    unsubscribe = store.subscribe(calls.append)
    store.replace([_task("a")])
    unsubscribe()
    store.replace([])
    assert len(calls) == 1


def test_failing_listener_does_not_block_others():
    store = TaskStore()
    calls = []

    def broken(_tasks):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(calls.append)
    store.replace([_task("a")])
    assert len(calls) == 1


def test_snapshot_is_a_copy():
    store = TaskStore([_task("a")])
    snapshot = store.snapshot
    snapshot.clear()
    assert len(store) == 1


def test_upsert_replaces_in_place_or_appends():
    first = _task("a")
    second = _task("b")
    store = TaskStore([first, second])

    store.upsert(Task(id=first.id, title="a2"))
    store.upsert(_task("c"))

    assert [t.title for t in store.snapshot] == ["a2", "b", "c"]


def test_remove_and_restore():
    task = _task("a")
    store = TaskStore([task, _task("b")])

    removed = store.remove(task.id)
    assert removed is task
    assert store.get(task.id) is None
    assert store.remove("missing") is None

    store.restore(task)
    store.restore(task)
    assert [t.title for t in store.snapshot] == ["b", "a"]


def test_view_delegates_to_derivation(now):
    store = TaskStore(
        [
            _task("today", due_date=now),
            _task("next", due_date=now + timedelta(days=2)),
            _task("done", completed=True),
        ]
    )
    assert [t.title for t in store.view(ViewKind.TODAY, now=now)] == ["today"]
    groups = store.view("upcoming", now=now)
    assert [t.title for g in groups for t in g.tasks] == ["next"]
    assert [t.title for t in store.view("completed")] == ["done"]
