"""Todo and Subtask data models."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

PRIORITIES = ("low", "medium", "high")
CATEGORIES = ("personal", "work", "shopping", "health", "other")

DEFAULT_PRIORITY = "medium"
DEFAULT_CATEGORY = "personal"


@dataclass
class Subtask:
    """A checklist item inside a todo."""

    id: str
    title: str
    completed: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subtask:
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class Todo:
    """A single task on the user's list.

    Attributes:
        id: Unique identifier (UUID hex).
        title: Display text, already trimmed.
        completed: Whether the task is done.
        priority: One of ``PRIORITIES``.
        category: One of ``CATEGORIES``.
        created_at: Creation time (aware, UTC).
        due_date: Optional deadline. Reminders are only possible when set.
        subtasks: Ordered checklist items.
    """

    id: str
    title: str
    completed: bool = False
    priority: str = DEFAULT_PRIORITY
    category: str = DEFAULT_CATEGORY
    created_at: datetime | None = None
    due_date: datetime | None = None
    subtasks: list[Subtask] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.created_at is None:
            self.created_at = datetime.now(UTC)

    # -- Convenience properties ------------------------------------------------

    @property
    def is_active(self) -> bool:
        return not self.completed

    @property
    def subtask_progress(self) -> tuple[int, int]:
        """Return ``(done, total)`` for the subtask checklist."""
        done = sum(1 for s in self.subtasks if s.completed)
        return done, len(self.subtasks)

    # -- Serialization ---------------------------------------------------------

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``todos`` column order."""
        return (
            self.id,
            self.title,
            int(self.completed),
            self.priority,
            self.category,
            self.created_at.isoformat() if self.created_at else None,
            self.due_date.isoformat() if self.due_date else None,
            json.dumps([asdict(s) for s in self.subtasks]),
        )

    @classmethod
    def from_row(cls, row: tuple) -> Todo:
        """Deserialize from a SQLite row tuple."""
        priority = row[3] if row[3] in PRIORITIES else DEFAULT_PRIORITY
        # Rows written before categories existed carry NULL
        category = row[4] if row[4] in CATEGORIES else DEFAULT_CATEGORY
        return cls(
            id=row[0],
            title=row[1],
            completed=bool(row[2]),
            priority=priority,
            category=category,
            created_at=datetime.fromisoformat(row[5]) if row[5] else None,
            due_date=datetime.fromisoformat(row[6]) if row[6] else None,
            subtasks=[Subtask.from_dict(s) for s in json.loads(row[7] or "[]")],
        )


def make_id() -> str:
    """Generate a new todo or subtask ID."""
    return uuid.uuid4().hex
