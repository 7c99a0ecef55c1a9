"""TodoStore: aiosqlite CRUD for todos, with change listeners."""

from __future__ import annotations

import dataclasses
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import aiosqlite

from taskflow.config import settings
from taskflow.todos.models import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_PRIORITY,
    PRIORITIES,
    Subtask,
    Todo,
    make_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    TodoListener = Callable[[list[Todo]], None]

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS todos (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0,
    priority TEXT NOT NULL DEFAULT 'medium',
    category TEXT,
    created_at TEXT NOT NULL,
    due_date TEXT,
    subtasks TEXT NOT NULL DEFAULT '[]'
)
"""

_COLUMNS = "id, title, completed, priority, category, created_at, due_date, subtasks"

_UPDATABLE = {"title", "completed", "priority", "category", "due_date", "subtasks"}


def _clean_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        msg = "Title must not be empty"
        raise ValueError(msg)
    return cleaned


def _check_priority(priority: str) -> str:
    if priority not in PRIORITIES:
        msg = f"Unknown priority '{priority}' (expected one of {', '.join(PRIORITIES)})"
        raise ValueError(msg)
    return priority


def _check_category(category: str) -> str:
    if category not in CATEGORIES:
        msg = f"Unknown category '{category}' (expected one of {', '.join(CATEGORIES)})"
        raise ValueError(msg)
    return category


class TodoStore:
    """Persists todos in SQLite and notifies listeners of every change.

    Singleton accessed via ``TodoStore.get()``.  Pass an explicit *db_path*
    for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: TodoStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path
        self._initialised = False
        self._listeners: list[TodoListener] = []

    @classmethod
    def get(cls) -> TodoStore:
        """Return the shared TodoStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    # -- Listeners -------------------------------------------------------------

    def subscribe(self, listener: TodoListener) -> None:
        """Call *listener* with the full todo list after every mutation."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: TodoListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _publish(self) -> None:
        if not self._listeners:
            return
        todos = await self.list_todos()
        for listener in list(self._listeners):
            try:
                listener(todos)
            except Exception:
                logger.exception("Todo listener %r failed", listener)

    # -- Internal helpers ------------------------------------------------------

    async def _connect(self) -> aiosqlite.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(str(self._db_path))
        if not self._initialised:
            await db.execute(_CREATE_TABLE)
            await db.commit()
            self._initialised = True
        return db

    async def _write(self, todo: Todo) -> None:
        db = await self._connect()
        try:
            await db.execute(
                f"INSERT OR REPLACE INTO todos ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                todo.to_row(),
            )
            await db.commit()
        finally:
            await db.close()

    async def _require(self, todo_id: str) -> Todo:
        todo = await self.get_todo(todo_id)
        if todo is None:
            msg = f"Todo '{todo_id}' not found"
            raise KeyError(msg)
        return todo

    # -- Queries ---------------------------------------------------------------

    async def get_todo(self, todo_id: str) -> Todo | None:
        """Fetch a todo by ID, or None if not found."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM todos WHERE id = ?", (todo_id,)
            )
            row = await cursor.fetchone()
            return Todo.from_row(row) if row else None
        finally:
            await db.close()

    async def list_todos(self) -> list[Todo]:
        """Return all todos, newest first."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM todos ORDER BY created_at DESC, rowid DESC"
            )
            rows = await cursor.fetchall()
            return [Todo.from_row(row) for row in rows]
        finally:
            await db.close()

    async def resolve_id(self, prefix: str) -> str:
        """Expand an ID prefix to a full todo ID.

        Raises KeyError when nothing matches and ValueError when the prefix is
        ambiguous.
        """
        prefix = prefix.strip()
        if not prefix:
            msg = "Todo ID must not be empty"
            raise ValueError(msg)
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT id FROM todos WHERE substr(id, 1, length(?)) = ? LIMIT 2",
                (prefix, prefix),
            )
            rows = await cursor.fetchall()
        finally:
            await db.close()
        if not rows:
            msg = f"Todo '{prefix}' not found"
            raise KeyError(msg)
        if len(rows) > 1:
            msg = f"Todo ID '{prefix}' is ambiguous"
            raise ValueError(msg)
        return rows[0][0]

    async def counts(self) -> tuple[int, int]:
        """Return ``(active, completed)`` counts."""
        todos = await self.list_todos()
        completed = sum(1 for t in todos if t.completed)
        return len(todos) - completed, completed

    # -- Mutations -------------------------------------------------------------

    async def add_todo(
        self,
        title: str,
        priority: str = DEFAULT_PRIORITY,
        category: str = DEFAULT_CATEGORY,
        due_date: datetime | None = None,
        subtasks: list[str] | None = None,
    ) -> Todo:
        """Create a new todo and return it."""
        todo = Todo(
            id=make_id(),
            title=_clean_title(title),
            priority=_check_priority(priority),
            category=_check_category(category),
            created_at=datetime.now(UTC),
            due_date=due_date,
            subtasks=[Subtask(id=make_id(), title=_clean_title(s)) for s in subtasks or []],
        )
        await self._write(todo)
        logger.info("Added todo: %s (%s)", todo.title, todo.id)
        await self._publish()
        return todo

    async def update_todo(self, todo_id: str, **changes: Any) -> Todo:
        """Apply field changes to a todo. ``id`` and ``created_at`` are fixed."""
        unknown = set(changes) - _UPDATABLE
        if unknown:
            msg = f"Cannot update field(s): {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])
        if "priority" in changes:
            _check_priority(changes["priority"])
        if "category" in changes:
            _check_category(changes["category"])

        todo = dataclasses.replace(await self._require(todo_id), **changes)
        await self._write(todo)
        logger.info("Updated todo %s: %s", todo_id, ", ".join(sorted(changes)))
        await self._publish()
        return todo

    async def toggle_todo(self, todo_id: str) -> Todo:
        """Flip the completed flag."""
        todo = await self._require(todo_id)
        return await self.update_todo(todo_id, completed=not todo.completed)

    async def delete_todo(self, todo_id: str) -> bool:
        """Delete a todo. Returns True if a row was removed."""
        db = await self._connect()
        try:
            cursor = await db.execute("DELETE FROM todos WHERE id = ?", (todo_id,))
            await db.commit()
            deleted = cursor.rowcount > 0
        finally:
            await db.close()
        if deleted:
            logger.info("Deleted todo: %s", todo_id)
            await self._publish()
        return deleted

    async def clear_completed(self) -> int:
        """Delete all completed todos. Returns how many were removed."""
        db = await self._connect()
        try:
            cursor = await db.execute("DELETE FROM todos WHERE completed = 1")
            await db.commit()
            removed = cursor.rowcount
        finally:
            await db.close()
        if removed:
            logger.info("Cleared %d completed todo(s)", removed)
            await self._publish()
        return removed

    # -- Subtasks --------------------------------------------------------------

    async def add_subtask(self, todo_id: str, title: str) -> Subtask:
        todo = await self._require(todo_id)
        subtask = Subtask(id=make_id(), title=_clean_title(title))
        await self.update_todo(todo_id, subtasks=[*todo.subtasks, subtask])
        return subtask

    async def toggle_subtask(self, todo_id: str, subtask_id: str) -> Subtask:
        todo = await self._require(todo_id)
        for subtask in todo.subtasks:
            if subtask.id == subtask_id:
                subtask.completed = not subtask.completed
                await self.update_todo(todo_id, subtasks=todo.subtasks)
                return subtask
        msg = f"Subtask '{subtask_id}' not found on todo '{todo_id}'"
        raise KeyError(msg)

    async def delete_subtask(self, todo_id: str, subtask_id: str) -> bool:
        todo = await self._require(todo_id)
        remaining = [s for s in todo.subtasks if s.id != subtask_id]
        if len(remaining) == len(todo.subtasks):
            return False
        await self.update_todo(todo_id, subtasks=remaining)
        return True
