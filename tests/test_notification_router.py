"""Tests for NotificationRouter."""

import pytest

from taskflow.notifications.channels import ReminderAlert
from taskflow.notifications.router import NotificationRouter

# -- Helpers -----------------------------------------------------------------


class FakeChannel:
    """Minimal channel implementation for testing."""

    def __init__(self, channel_name: str = "fake") -> None:
        self._name = channel_name
        self.shown: list[ReminderAlert] = []

    @property
    def name(self) -> str:
        return self._name

    def show(self, alert: ReminderAlert) -> bool:
        self.shown.append(alert)
        return True


class DecliningChannel(FakeChannel):
    """Channel that never shows anything."""

    def show(self, alert: ReminderAlert) -> bool:
        return False


class ExplodingChannel(FakeChannel):
    def show(self, alert: ReminderAlert) -> bool:
        raise RuntimeError("display unavailable")


class GatedChannel(FakeChannel):
    """Channel that asks for permission before out-of-app alerts."""

    def __init__(self, channel_name: str = "gated", granted: bool = True) -> None:
        super().__init__(channel_name)
        self._granted = granted
        self.asked = 0

    async def request_permission(self) -> bool:
        self.asked += 1
        return self._granted


class FakeCue:
    def __init__(self) -> None:
        self.played = 0

    def play(self) -> None:
        self.played += 1


ALERT = ReminderAlert(title="Deadline", body="Task: Ship it", urgent=True)


# -- Registration ------------------------------------------------------------


def test_register_and_list() -> None:
    router = NotificationRouter.get()
    ch = FakeChannel("desktop")
    router.register_channel(ch)
    assert router.list_channels() == ["desktop"]
    assert router.get_channel("desktop") is ch


def test_register_duplicate_raises() -> None:
    router = NotificationRouter.get()
    router.register_channel(FakeChannel("desktop"))
    with pytest.raises(ValueError, match="already registered"):
        router.register_channel(FakeChannel("desktop"))


def test_get_channel_missing_returns_none() -> None:
    router = NotificationRouter.get()
    assert router.get_channel("nonexistent") is None


# -- Singleton ---------------------------------------------------------------


def test_singleton_same_instance() -> None:
    assert NotificationRouter.get() is NotificationRouter.get()


def test_reset_creates_new_instance() -> None:
    a = NotificationRouter.get()
    NotificationRouter._reset()
    assert NotificationRouter.get() is not a


# -- notify ------------------------------------------------------------------


def test_notify_reaches_every_channel() -> None:
    router = NotificationRouter()
    desktop, console = FakeChannel("desktop"), FakeChannel("console")
    router.register_channel(desktop)
    router.register_channel(console)

    assert router.notify(ALERT) is True
    assert desktop.shown == [ALERT]
    assert console.shown == [ALERT]


def test_notify_without_channels_returns_false() -> None:
    assert NotificationRouter().notify(ALERT) is False


def test_failing_channel_does_not_block_others() -> None:
    router = NotificationRouter()
    console = FakeChannel("console")
    router.register_channel(ExplodingChannel("desktop"))
    router.register_channel(console)

    assert router.notify(ALERT) is True
    assert console.shown == [ALERT]


def test_notify_false_when_all_decline() -> None:
    router = NotificationRouter()
    router.register_channel(DecliningChannel("desktop"))
    assert router.notify(ALERT) is False


# -- play_cue ----------------------------------------------------------------


def test_play_cue() -> None:
    router = NotificationRouter()
    cue = FakeCue()
    router.set_audio_cue(cue)

    router.play_cue()
    assert cue.played == 1


def test_play_cue_without_cue_is_noop() -> None:
    NotificationRouter().play_cue()


def test_play_cue_swallows_errors() -> None:
    class BrokenCue:
        def play(self) -> None:
            raise OSError("no audio device")

    router = NotificationRouter()
    router.set_audio_cue(BrokenCue())
    router.play_cue()


# -- request_permission ------------------------------------------------------


async def test_request_permission_without_providers_is_false() -> None:
    router = NotificationRouter()
    router.register_channel(FakeChannel("console"))
    assert await router.request_permission() is False


async def test_request_permission_granted() -> None:
    router = NotificationRouter()
    gated = GatedChannel(granted=True)
    router.register_channel(gated)
    router.register_channel(FakeChannel("console"))

    assert await router.request_permission() is True
    assert gated.asked == 1


async def test_request_permission_denied() -> None:
    router = NotificationRouter()
    router.register_channel(GatedChannel(granted=False))
    assert await router.request_permission() is False


async def test_request_permission_error_counts_as_denied() -> None:
    class BrokenGate(GatedChannel):
        async def request_permission(self) -> bool:
            raise RuntimeError("platform exploded")

    router = NotificationRouter()
    router.register_channel(BrokenGate("broken"))
    router.register_channel(GatedChannel("ok", granted=True))
    assert await router.request_permission() is True
