"""ReminderScheduler: arms one timer per (todo, offset) and fires each once."""

from __future__ import annotations

import logging
import zoneinfo
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING

from taskflow.config import settings
from taskflow.notifications.channels import ReminderAlert
from taskflow.reminders.offsets import REMINDER_OFFSETS, ReminderKey, urgent_labels

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taskflow.notifications.channels import Notifier
    from taskflow.reminders.clock import Clock, TimerHandle
    from taskflow.reminders.offsets import ReminderOffset
    from taskflow.todos.models import Todo

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Keeps the armed reminder timers in step with the current todo list.

    Every ``observe`` throws away all armed timers and recomputes them from
    scratch.  A reminder whose key is in the already-shown set is never armed
    again for the lifetime of this instance, even if the todo's due date
    changes afterwards.

    Args:
        notifier: Receives alerts and audio cues when a timer fires.
        clock: Time source and timer factory.
        offsets: Ordered reminder lead times (default ``REMINDER_OFFSETS``).
        timezone: IANA zone applied to naive due dates (default from settings).
    """

    def __init__(
        self,
        notifier: Notifier,
        clock: Clock,
        *,
        offsets: Iterable[ReminderOffset] = REMINDER_OFFSETS,
        timezone: str | None = None,
    ) -> None:
        self._notifier = notifier
        self._clock = clock
        self._offsets = tuple(offsets)
        self._urgent = urgent_labels(self._offsets)
        self._tz = zoneinfo.ZoneInfo(timezone or settings.scheduler_timezone)
        self._armed: dict[str, dict[str, TimerHandle]] = {}
        self._shown: set[ReminderKey] = set()
        self._disposed = False

    # -- Introspection ---------------------------------------------------------

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def armed_keys(self) -> set[ReminderKey]:
        return {
            ReminderKey(todo_id, label)
            for todo_id, timers in self._armed.items()
            for label in timers
        }

    @property
    def shown_keys(self) -> frozenset[ReminderKey]:
        return frozenset(self._shown)

    def armed_count(self, todo_id: str) -> int:
        return len(self._armed.get(todo_id, {}))

    # -- Public API ------------------------------------------------------------

    def observe(self, todos: Iterable[Todo]) -> None:
        """Recompute every armed timer from the given todo list. Never raises."""
        if self._disposed:
            logger.debug("observe() called after dispose; ignoring")
            return
        try:
            self._cancel_all()
            now = self._clock.now()
            seen: set[str] = set()
            for todo in todos:
                todo_id = getattr(todo, "id", None)
                if todo_id is not None and todo_id in seen:
                    logger.warning("Skipping duplicate todo id %r", todo_id)
                    continue
                if todo_id is not None:
                    seen.add(todo_id)
                try:
                    timers = self._arm_todo(todo, now)
                except Exception:
                    logger.warning(
                        "Skipping todo that cannot be scheduled: %r",
                        getattr(todo, "id", todo),
                        exc_info=True,
                    )
                    continue
                if timers:
                    self._armed[todo.id] = timers
        except Exception:
            logger.exception("Reminder recompute failed")
            return
        logger.debug("Armed %d reminder(s) for %d todo(s)", len(self.armed_keys), len(self._armed))

    async def request_permission(self) -> bool:
        """Ask for permission to show out-of-app alerts. False on any failure."""
        try:
            return bool(await self._notifier.request_permission())
        except Exception:
            logger.exception("Notification permission request failed")
            return False

    def dispose(self) -> None:
        """Cancel every armed timer. Later ``observe`` calls do nothing."""
        if self._disposed:
            return
        self._disposed = True
        self._cancel_all()
        logger.debug("Reminder scheduler disposed")

    # -- Internal --------------------------------------------------------------

    def _cancel_all(self) -> None:
        for timers in self._armed.values():
            for handle in timers.values():
                try:
                    handle.cancel()
                except Exception:
                    logger.exception("Failed to cancel reminder timer")
        self._armed.clear()

    def _due_date(self, todo: Todo) -> datetime:
        due = todo.due_date
        if isinstance(due, str):
            due = datetime.fromisoformat(due)
        if not isinstance(due, datetime):
            msg = f"Unusable due date: {due!r}"
            raise TypeError(msg)
        if due.tzinfo is None:
            due = due.replace(tzinfo=self._tz)
        return due

    def _arm_todo(self, todo: Todo, now: datetime) -> dict[str, TimerHandle]:
        if todo.completed or todo.due_date is None:
            return {}
        if not todo.id:
            msg = "Todo has no id"
            raise ValueError(msg)

        due = self._due_date(todo)
        timers: dict[str, TimerHandle] = {}
        try:
            for offset in self._offsets:
                fire_at = due - offset.lead_time
                if fire_at <= now:
                    continue
                key = ReminderKey(todo.id, offset.label)
                if key in self._shown:
                    continue
                timers[offset.label] = self._clock.call_later(
                    fire_at - now,
                    partial(self._fire, key, todo.title),
                    name=f"{todo.id}:{offset.label}",
                )
        except Exception:
            for handle in timers.values():
                handle.cancel()
            raise
        return timers

    def _fire(self, key: ReminderKey, todo_title: str) -> None:
        """Timer callback. Marks the key shown before any side effect runs."""
        if self._disposed or key in self._shown:
            return
        self._shown.add(key)

        timers = self._armed.get(key.todo_id)
        if timers is not None:
            timers.pop(key.label, None)
            if not timers:
                del self._armed[key.todo_id]

        alert = ReminderAlert(
            title=key.label,
            body=f"Task: {todo_title}",
            urgent=key.label in self._urgent,
        )
        logger.info("Reminder '%s' firing for todo %s", key.label, key.todo_id)

        try:
            self._notifier.notify(alert)
        except Exception:
            logger.exception("Reminder alert failed for todo %s", key.todo_id)
        try:
            self._notifier.play_cue()
        except Exception:
            logger.exception("Reminder sound failed for todo %s", key.todo_id)
