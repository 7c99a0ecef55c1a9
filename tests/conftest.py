"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from taskflow.notifications.router import NotificationRouter
from taskflow.todos.store import TodoStore

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


class FakeTimer:
    def __init__(self, fire_at, callback, name: str) -> None:
        self.fire_at = fire_at
        self.callback = callback
        self.name = name
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def live(self) -> bool:
        return not (self.cancelled or self.fired)


class FakeClock:
    """Virtual clock: timers only run when ``advance`` moves time past them."""

    def __init__(self, start: datetime = NOW) -> None:
        self._now = start
        self.timers: list[FakeTimer] = []
        self.running = False

    def now(self) -> datetime:
        return self._now

    def call_later(self, delay, callback, *, name: str = "") -> FakeTimer:
        timer = FakeTimer(self._now + delay, callback, name)
        self.timers.append(timer)
        return timer

    def advance(self, delta) -> None:
        target = self._now + delta
        while True:
            due = [t for t in self.timers if t.live and t.fire_at <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.fire_at)
            self._now = timer.fire_at
            timer.fired = True
            timer.callback()
        self._now = target

    def pending(self) -> list[str]:
        return sorted(t.name for t in self.timers if t.live)

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False


class FakeNotifier:
    """Records alerts and audio cues instead of showing them."""

    def __init__(self) -> None:
        self.alerts = []
        self.cues = 0
        self.permission = True

    def notify(self, alert) -> bool:
        self.alerts.append(alert)
        return True

    def play_cue(self) -> None:
        self.cues += 1

    async def request_permission(self) -> bool:
        return self.permission


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def store(tmp_path) -> TodoStore:
    """Create a TodoStore backed by a temp database."""
    return TodoStore(db_path=tmp_path / "test.db")


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Reset the router and store singletons around each test."""
    NotificationRouter._reset()
    TodoStore._reset()
    yield
    NotificationRouter._reset()
    TodoStore._reset()
