# planner/main.py
from __future__ import annotations

import argparse
import json
from dataclasses import asdict
import os
import sys
from typing import Optional, Sequence

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.priorities import DEFAULT_PRIORITY, PRIORITIES, priority_label
from core.recurrence import DEFAULT_RECURRENCE, RECURRENCE_LABELS
from core.settings import API, APP_NAME
from helpers.date_parsing import parse_datetime_input
from models.draft import TaskDraft
from services.tags import parse_tags
from services.task_api import HttpTaskApi, task_to_payload
from services.tasks import TaskService
from services.views import DayGroup, TaskFilter, ViewKind
from storage.config import VIEW_CHOICES, load_config, update_config
from utils.datetime_utils import to_local


def _print_notification(level: str, message: str) -> None:
    stream = sys.stderr if level == "error" else sys.stdout
    print(message, file=stream)


def _format_task(task) -> str:
    mark = "x" if task.completed else " "
    parts = [f"[{mark}] {task.id[:8]}  {task.title}", f"({priority_label(task.priority)})"]
    if task.due_date is not None:
        parts.append(f"due {to_local(task.due_date, None):%Y-%m-%d %H:%M}")
    if task.tag_list:
        parts.append("#" + " #".join(task.tag_list))
    if task.is_categorized:
        parts.append(f"[{task.category}]")
    return "  ".join(parts)


def _resolve_id(service: TaskService, prefix: str) -> Optional[str]:
    matches = [t.id for t in service.store.snapshot if t.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        print(f"No task matches {prefix!r}", file=sys.stderr)
    else:
        print(f"Task id {prefix!r} is ambiguous", file=sys.stderr)
    return None


def _parse_completed(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.lower() in ("yes", "true", "1")


def _parse_due(value: Optional[str]):
    if value is None or not value.strip():
        return None
    due = parse_datetime_input(value)
    if due is None:
        raise ValueError(f"Unrecognized date: {value!r}")
    return due


def _edit_fields(args) -> dict:
    fields = {}
    for name in ("title", "description", "priority", "recurrence", "category"):
        value = getattr(args, name)
        if value is not None:
            fields[name] = value
    if args.due is not None:
        fields["due_date"] = _parse_due(args.due)
    if args.tags is not None:
        fields["tags"] = parse_tags(args.tags)
    return fields


def build_parser(default_view: str = "inbox") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planner", description=f"{APP_NAME} task manager")
    backend = parser.add_mutually_exclusive_group()
    backend.add_argument("--api", help="Base URL of the planner web backend")
    backend.add_argument("--local", action="store_true", help="Use the local SQLite database")
    parser.add_argument("--user", help="E-mail of the signed-in user (local backend)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="Show a task view")
    p_list.add_argument("--view", choices=VIEW_CHOICES, default=default_view)
    p_list.add_argument("--priority", choices=PRIORITIES, type=str.upper)
    p_list.add_argument("--due-after")
    p_list.add_argument("--due-before")
    p_list.add_argument("--completed", choices=("yes", "no"))
    p_list.add_argument("--json", action="store_true", help="Print tasks as JSON")

    p_add = sub.add_parser("add", help="Create a task")
    p_add.add_argument("title")
    p_add.add_argument("--description")
    p_add.add_argument("--due")
    p_add.add_argument("--priority", choices=PRIORITIES, type=str.upper, default=DEFAULT_PRIORITY)
    p_add.add_argument(
        "--recurrence", choices=tuple(RECURRENCE_LABELS), type=str.upper, default=DEFAULT_RECURRENCE
    )
    p_add.add_argument("--tags", default="")
    p_add.add_argument("--category")

    p_gen = sub.add_parser("generate", help="Create a task inferred from its title")
    p_gen.add_argument("title")

    p_done = sub.add_parser("done", help="Toggle completion of a task")
    p_done.add_argument("task_id")

    p_del = sub.add_parser("delete", help="Delete a task")
    p_del.add_argument("task_id")

    p_desc = sub.add_parser("describe", help="Suggest a description for a title")
    p_desc.add_argument("title")

    p_edit = sub.add_parser("edit", help="Change fields of a task")
    p_edit.add_argument("task_id")
    p_edit.add_argument("--title")
    p_edit.add_argument("--description")
    p_edit.add_argument("--due", help="New due date; an empty string clears it")
    p_edit.add_argument("--priority", choices=PRIORITIES, type=str.upper)
    p_edit.add_argument("--recurrence", choices=tuple(RECURRENCE_LABELS), type=str.upper)
    p_edit.add_argument("--tags", help="Comma-separated tags; an empty string clears them")
    p_edit.add_argument("--category")

    p_cfg = sub.add_parser("config", help="Show or save default settings")
    p_cfg.add_argument("--api-url")
    p_cfg.add_argument("--user-email")
    p_cfg.add_argument("--default-view", choices=VIEW_CHOICES)
    return parser


def _build_api(args, config):
    if args.local:
        from services.local_api import SqlTaskApi
        from storage.db import init_db

        user = args.user or config.user_email
        if not user:
            raise SystemExit("--user (or user_email in config.json) is required with --local")
        init_db()
        return SqlTaskApi(user)
    return HttpTaskApi(args.api or config.api_base_url or API.base_url)


def _cmd_list(service: TaskService, args) -> int:
    task_filter = None
    if args.view == ViewKind.FILTERED.value:
        task_filter = TaskFilter(
            priority=args.priority,
            due_after=parse_datetime_input(args.due_after),
            due_before=parse_datetime_input(args.due_before),
            completed=_parse_completed(args.completed),
        )
    result = service.store.view(args.view, task_filter=task_filter)
    if args.json:
        if args.view == ViewKind.UPCOMING.value:
            payload = {
                group.day.isoformat(): [task_to_payload(t) for t in group.tasks] for group in result
            }
        else:
            payload = [task_to_payload(t) for t in result]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0
    if not result:
        print("No tasks")
        return 0
    for item in result:
        if isinstance(item, DayGroup):
            print(f"{item.day:%A, %B %d}")
            for task in item.tasks:
                print("  " + _format_task(task))
        else:
            print(_format_task(item))
    return 0


def _cmd_config(args, path=None) -> int:
    changes = {
        "api_base_url": args.api_url,
        "user_email": args.user_email,
        "default_view": args.default_view,
    }
    changes = {key: value for key, value in changes.items() if value is not None}
    cfg = update_config(path, **changes) if changes else load_config(path)
    print(json.dumps(asdict(cfg), ensure_ascii=False, indent=2, sort_keys=True))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = load_config()
    args = build_parser(config.default_view).parse_args(argv)
    if args.command == "config":
        return _cmd_config(args)
    service = TaskService(_build_api(args, config), notify=_print_notification)
    try:
        return _run(service, args)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 2


def _run(service: TaskService, args) -> int:
    if args.command == "describe":
        print(service.describe(args.title))
        return 0
    if args.command == "add":
        draft = TaskDraft(
            title=args.title,
            description=args.description,
            due_date=_parse_due(args.due),
            priority=args.priority,
            recurrence=args.recurrence,
            tags=parse_tags(args.tags),
            category=args.category,
        )
        return 0 if service.create(draft) else 1
    if args.command == "generate":
        return 0 if service.generate(args.title) else 1

    if not service.refresh():
        return 1
    if args.command == "list":
        return _cmd_list(service, args)
    task_id = _resolve_id(service, args.task_id)
    if task_id is None:
        return 1
    if args.command == "done":
        return 0 if service.toggle(task_id) else 1
    if args.command == "edit":
        fields = _edit_fields(args)
        if not fields:
            print("Nothing to change", file=sys.stderr)
            return 1
        return 0 if service.update(task_id, **fields) else 1
    return 0 if service.delete(task_id) else 1


if __name__ == "__main__":
    raise SystemExit(main())
