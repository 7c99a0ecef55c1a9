"""Clock abstraction: read the time, run a callback later, cancel it.

``APSchedulerClock`` is the production implementation.  Each timer becomes a
one-off ``DateTrigger`` job whose function is a coroutine, so callbacks run on
the event loop thread rather than in APScheduler's thread pool.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from taskflow.config import settings
from taskflow.todos.models import make_id

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

logger = logging.getLogger(__name__)


@runtime_checkable
class TimerHandle(Protocol):
    """A pending callback that can be cancelled."""

    def cancel(self) -> None:
        """Stop the callback from running. Safe to call more than once."""
        ...


class Clock(Protocol):
    """Time source plus deferred execution."""

    def now(self) -> datetime:
        """Current time, timezone-aware."""
        ...

    def call_later(
        self, delay: timedelta, callback: Callable[[], None], *, name: str = ""
    ) -> TimerHandle:
        """Run *callback* once after *delay*."""
        ...


@runtime_checkable
class ServiceClock(Clock, Protocol):
    """A Clock whose timer backend is started and stopped by its owner."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


class _JobHandle:
    """TimerHandle backed by an APScheduler job id."""

    def __init__(self, scheduler: AsyncIOScheduler, job_id: str) -> None:
        self._scheduler = scheduler
        self.job_id = job_id

    def cancel(self) -> None:
        try:
            self._scheduler.remove_job(self.job_id)
        except JobLookupError:
            # Already fired or already cancelled
            pass


class APSchedulerClock:
    """Clock running timers as one-off jobs on an ``AsyncIOScheduler``.

    Args:
        timezone: IANA timezone string (default from settings).
    """

    def __init__(self, timezone: str | None = None) -> None:
        self._timezone = timezone or settings.scheduler_timezone
        self._scheduler = AsyncIOScheduler(timezone=self._timezone)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # -- Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        """Start the scheduler. Must be called with an event loop running."""
        if not self._running:
            self._scheduler.start()
            self._running = True
            logger.info("Reminder clock started (tz=%s)", self._timezone)

    def stop(self) -> None:
        """Shut down the scheduler, dropping any pending jobs."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Reminder clock stopped")

    # -- Clock -----------------------------------------------------------------

    def now(self) -> datetime:
        return datetime.now(UTC)

    def call_later(
        self, delay: timedelta, callback: Callable[[], None], *, name: str = ""
    ) -> TimerHandle:
        async def _run() -> None:
            callback()

        job = self._scheduler.add_job(
            _run,
            trigger=DateTrigger(run_date=self.now() + delay, timezone=self._timezone),
            id=make_id(),
            name=name or "reminder",
            misfire_grace_time=None,
        )
        return _JobHandle(self._scheduler, job.id)

    def pending_jobs(self) -> list[str]:
        """Names of jobs still waiting to run."""
        return [job.name for job in self._scheduler.get_jobs()]
