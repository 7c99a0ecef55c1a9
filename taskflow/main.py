"""Taskflow command-line entry point.

Usage examples:
    taskflow add "Write report" --priority high --due "2026-10-20 17:00"
    taskflow list --status active
    taskflow done 3fa2
    taskflow run
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import zoneinfo
from datetime import date, datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from taskflow.app import ReminderService, init_notifications
from taskflow.config import settings
from taskflow.todos.filters import STATUS_FILTERS, filter_todos
from taskflow.todos.models import CATEGORIES, PRIORITIES, Todo
from taskflow.todos.store import TodoStore

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=settings.get_log_level(),
)
logger = logging.getLogger(__name__)

_PRIORITY_STYLE = {"high": "bold red", "medium": "yellow", "low": "green"}


# -- Argument parsing ----------------------------------------------------------


def parse_due(value: str) -> datetime:
    """Parse an ISO date/time. Naive values use the configured timezone."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as exc:
        msg = f"invalid due date '{value}' (expected e.g. 2026-10-20T17:00)"
        raise argparse.ArgumentTypeError(msg) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zoneinfo.ZoneInfo(settings.scheduler_timezone))
    return parsed


def parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        msg = f"invalid date '{value}' (expected YYYY-MM-DD)"
        raise argparse.ArgumentTypeError(msg) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskflow", description="Personal to-do list with reminders")
    parser.add_argument("--db", type=Path, default=None, help="SQLite file (default from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add a todo")
    add.add_argument("title")
    add.add_argument("--priority", choices=PRIORITIES, default="medium")
    add.add_argument("--category", choices=CATEGORIES, default="personal")
    add.add_argument("--due", type=parse_due, default=None)
    add.add_argument("--subtask", action="append", default=[], help="May be repeated")
    add.set_defaults(handler=_cmd_add)

    ls = sub.add_parser("list", help="List todos")
    ls.add_argument("--status", choices=STATUS_FILTERS, default="all")
    ls.add_argument("--category", choices=CATEGORIES, default=None)
    ls.add_argument("--date", type=parse_day, default=None, help="Only todos due on this day")
    ls.set_defaults(handler=_cmd_list)

    done = sub.add_parser("done", help="Toggle a todo's completed state")
    done.add_argument("todo_id")
    done.set_defaults(handler=_cmd_done)

    edit = sub.add_parser("edit", help="Change a todo")
    edit.add_argument("todo_id")
    edit.add_argument("--title")
    edit.add_argument("--priority", choices=PRIORITIES)
    edit.add_argument("--category", choices=CATEGORIES)
    due = edit.add_mutually_exclusive_group()
    due.add_argument("--due", type=parse_due)
    due.add_argument("--no-due", action="store_true", help="Remove the due date")
    edit.set_defaults(handler=_cmd_edit)

    rm = sub.add_parser("rm", help="Delete a todo")
    rm.add_argument("todo_id")
    rm.set_defaults(handler=_cmd_rm)

    clear = sub.add_parser("clear-completed", help="Delete all completed todos")
    clear.set_defaults(handler=_cmd_clear)

    subtask = sub.add_parser("subtask", help="Manage a todo's subtasks")
    subtask.add_argument("action", choices=("add", "done", "rm"))
    subtask.add_argument("todo_id")
    subtask.add_argument("value", help="Subtask title (add) or subtask ID prefix (done/rm)")
    subtask.set_defaults(handler=_cmd_subtask)

    run = sub.add_parser("run", help="Run the reminder service in the foreground")
    run.set_defaults(handler=_cmd_run)

    return parser


# -- Rendering -----------------------------------------------------------------


def _format_due(todo: Todo) -> str:
    if todo.due_date is None:
        return ""
    due = todo.due_date
    if due.tzinfo is not None:
        due = due.astimezone(zoneinfo.ZoneInfo(settings.scheduler_timezone))
    return due.strftime("%Y-%m-%d %H:%M")


def render_todos(todos: list[Todo]) -> Table:
    """Build a rich table for a todo listing."""
    table = Table(show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("")
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Category")
    table.add_column("Due", no_wrap=True)
    table.add_column("Subtasks", justify="right")
    for todo in todos:
        done, total = todo.subtask_progress
        table.add_row(
            todo.id[:8],
            "✓" if todo.completed else "",
            f"[strike]{todo.title}[/strike]" if todo.completed else todo.title,
            f"[{_PRIORITY_STYLE[todo.priority]}]{todo.priority}[/]",
            todo.category,
            _format_due(todo),
            f"{done}/{total}" if total else "",
        )
    return table


# -- Commands ------------------------------------------------------------------


async def _cmd_add(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    todo = await store.add_todo(
        args.title,
        priority=args.priority,
        category=args.category,
        due_date=args.due,
        subtasks=args.subtask,
    )
    console.print(f"Added [bold]{todo.title}[/bold] ({todo.id[:8]})")
    return 0


async def _cmd_list(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    todos = filter_todos(
        await store.list_todos(), args.status, category=args.category, on_date=args.date
    )
    if not todos:
        empty = {"all": "No tasks yet", "active": "No active tasks", "completed": "No completed tasks"}
        console.print(empty[args.status])
        return 0
    console.print(render_todos(todos))
    active, completed = await store.counts()
    console.print(f"{active} active, {completed} completed")
    return 0


async def _cmd_done(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    todo = await store.toggle_todo(await store.resolve_id(args.todo_id))
    state = "completed" if todo.completed else "reopened"
    console.print(f"{todo.title}: {state}")
    return 0


async def _cmd_edit(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    changes: dict = {}
    for field_name in ("title", "priority", "category", "due"):
        value = getattr(args, field_name)
        if value is not None:
            changes["due_date" if field_name == "due" else field_name] = value
    if args.no_due:
        changes["due_date"] = None
    if not changes:
        console.print("Nothing to change")
        return 1
    todo = await store.update_todo(await store.resolve_id(args.todo_id), **changes)
    console.print(f"Updated [bold]{todo.title}[/bold]")
    return 0


async def _cmd_rm(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    todo_id = await store.resolve_id(args.todo_id)
    await store.delete_todo(todo_id)
    console.print(f"Deleted {todo_id[:8]}")
    return 0


async def _cmd_clear(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    removed = await store.clear_completed()
    console.print(f"Removed {removed} completed todo(s)")
    return 0


async def _cmd_subtask(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    todo_id = await store.resolve_id(args.todo_id)
    if args.action == "add":
        subtask = await store.add_subtask(todo_id, args.value)
        console.print(f"Added subtask {subtask.title} ({subtask.id[:8]})")
        return 0

    todo = await store.get_todo(todo_id)
    matches = [s for s in todo.subtasks if s.id.startswith(args.value)] if todo else []
    if not matches:
        msg = f"Subtask '{args.value}' not found"
        raise KeyError(msg)
    if len(matches) > 1:
        msg = f"Subtask ID '{args.value}' is ambiguous"
        raise ValueError(msg)
    if args.action == "done":
        subtask = await store.toggle_subtask(todo_id, matches[0].id)
        console.print(f"{subtask.title}: {'done' if subtask.completed else 'not done'}")
    else:
        await store.delete_subtask(todo_id, matches[0].id)
        console.print(f"Deleted subtask {matches[0].title}")
    return 0


async def _cmd_run(args: argparse.Namespace, store: TodoStore, console: Console) -> int:
    service = ReminderService(store, init_notifications())
    console.print("Watching for reminders. Press Ctrl-C to stop.")
    await service.run_forever()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the selected command."""
    args = build_parser().parse_args(argv)
    console = Console()
    store = TodoStore(db_path=args.db) if args.db else TodoStore.get()
    try:
        return asyncio.run(args.handler(args, store, console))
    except (KeyError, ValueError) as exc:
        Console(stderr=True).print(f"[red]Error:[/red] {exc.args[0] if exc.args else exc}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
