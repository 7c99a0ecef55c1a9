"""Reminder service wiring: store, notification channels, clock and scheduler."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from taskflow.config import settings
from taskflow.notifications.console_channel import ConsoleChannel, TerminalBell
from taskflow.notifications.desktop_channel import DesktopChannel
from taskflow.notifications.router import NotificationRouter
from taskflow.reminders.clock import APSchedulerClock
from taskflow.reminders.scheduler import ReminderScheduler

if TYPE_CHECKING:
    from taskflow.reminders.clock import ServiceClock
    from taskflow.todos.models import Todo
    from taskflow.todos.store import TodoStore

logger = logging.getLogger(__name__)


def init_notifications(router: NotificationRouter | None = None) -> NotificationRouter:
    """Register the desktop and console channels and the terminal bell."""
    router = router or NotificationRouter.get()
    if router.get_channel("desktop") is None:
        router.register_channel(DesktopChannel())
    if router.get_channel("console") is None:
        router.register_channel(ConsoleChannel())
    router.set_audio_cue(TerminalBell())
    logger.info("Notifications initialized: channels=%s", router.list_channels())
    return router


class ReminderService:
    """Runs reminders for the todos in a store until stopped.

    In-process store mutations reach the scheduler through the store's
    listener hook.  Changes written by other processes (e.g. a second CLI
    invocation) are picked up by polling every *poll_seconds*.

    Args:
        store: Task source.
        router: Notifier handed to the scheduler.
        clock: Timer backend (default: a new APSchedulerClock).
        poll_seconds: Interval for detecting external changes (default from settings).
    """

    def __init__(
        self,
        store: TodoStore,
        router: NotificationRouter,
        clock: ServiceClock | None = None,
        poll_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._router = router
        self._clock = clock or APSchedulerClock()
        self._poll_seconds = max(
            0.5, poll_seconds if poll_seconds is not None else settings.store_poll_seconds
        )
        self._scheduler: ReminderScheduler | None = None
        self._snapshot: list[tuple] = []
        self._watcher: asyncio.Task | None = None

    @property
    def scheduler(self) -> ReminderScheduler | None:
        return self._scheduler

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        """Start the clock, ask for permission, and arm reminders for the current list."""
        self._clock.start()
        self._scheduler = ReminderScheduler(self._router, self._clock)
        self._store.subscribe(self._observe)

        granted = await self._scheduler.request_permission()
        if not granted:
            logger.info("Desktop notifications not permitted; using in-app alerts only")

        self._observe(await self._store.list_todos())
        self._watcher = asyncio.ensure_future(self._watch())
        logger.info("Reminder service started (%d reminder(s) armed)", len(self._scheduler.armed_keys))

    async def stop(self) -> None:
        """Cancel every armed reminder and shut the clock down."""
        if self._watcher is not None:
            self._watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._watcher
            self._watcher = None
        self._store.unsubscribe(self._observe)
        if self._scheduler is not None:
            self._scheduler.dispose()
        self._clock.stop()
        logger.info("Reminder service stopped")

    async def run_forever(self) -> None:
        """Start, then wait until cancelled (e.g. Ctrl-C)."""
        await self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()

    async def refresh(self) -> bool:
        """Re-read the store and recompute reminders if anything changed."""
        todos = await self._store.list_todos()
        rows = [t.to_row() for t in todos]
        if rows == self._snapshot:
            return False
        logger.info("Todo list changed externally; recomputing reminders")
        self._observe(todos)
        return True

    # -- Internal --------------------------------------------------------------

    def _observe(self, todos: list[Todo]) -> None:
        self._snapshot = [t.to_row() for t in todos]
        if self._scheduler is not None:
            self._scheduler.observe(todos)

    async def _watch(self) -> None:
        while True:
            await asyncio.sleep(self._poll_seconds)
            try:
                await self.refresh()
            except Exception:
                logger.exception("Failed to refresh todos from store")
