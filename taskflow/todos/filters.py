"""List views over todos: status/category/date filters and calendar grouping."""

from __future__ import annotations

import zoneinfo
from collections import defaultdict
from typing import TYPE_CHECKING

from taskflow.config import settings

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime, tzinfo

    from taskflow.todos.models import Todo

STATUS_FILTERS = ("all", "active", "completed")


def _local_day(moment: datetime, tz: tzinfo) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    return moment.astimezone(tz).date()


def _resolve_tz(tz: tzinfo | None) -> tzinfo:
    return tz or zoneinfo.ZoneInfo(settings.scheduler_timezone)


def filter_todos(
    todos: Iterable[Todo],
    status: str = "all",
    *,
    category: str | None = None,
    on_date: date | None = None,
    tz: tzinfo | None = None,
) -> list[Todo]:
    """Return the todos matching every given criterion, order preserved."""
    if status not in STATUS_FILTERS:
        msg = f"Unknown status filter '{status}'"
        raise ValueError(msg)
    zone = _resolve_tz(tz)

    result = []
    for todo in todos:
        if status == "active" and todo.completed:
            continue
        if status == "completed" and not todo.completed:
            continue
        if category and todo.category != category:
            continue
        if on_date is not None:
            if todo.due_date is None or _local_day(todo.due_date, zone) != on_date:
                continue
        result.append(todo)
    return result


def todos_by_date(todos: Iterable[Todo], tz: tzinfo | None = None) -> dict[date, list[Todo]]:
    """Group todos with a due date by their local calendar day."""
    zone = _resolve_tz(tz)
    grouped: dict[date, list[Todo]] = defaultdict(list)
    for todo in todos:
        if todo.due_date is not None:
            grouped[_local_day(todo.due_date, zone)].append(todo)
    return dict(grouped)


def categories_on(
    todos: Iterable[Todo], day: date, limit: int = 3, tz: tzinfo | None = None
) -> list[str]:
    """Distinct categories due on *day*, first-seen order, at most *limit*."""
    seen: list[str] = []
    for todo in todos_by_date(todos, tz).get(day, []):
        if todo.category not in seen:
            seen.append(todo.category)
    return seen[:limit]
