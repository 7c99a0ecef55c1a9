"""Notification protocols: alert channels, audio cues, and permission providers."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ReminderAlert:
    """A user-visible reminder.

    Attributes:
        title: Reminder offset label (e.g. ``"1 hour before"``).
        body: Text mentioning the todo's title.
        urgent: True for the deadline and the last reminder before it.
    """

    title: str
    body: str
    urgent: bool = False


@runtime_checkable
class AlertChannel(Protocol):
    """Protocol that all alert channels must satisfy."""

    @property
    def name(self) -> str:
        """Unique channel identifier (e.g. 'desktop', 'console')."""
        ...

    def show(self, alert: ReminderAlert) -> bool:
        """Display an alert. Returns True if it was shown."""
        ...


@runtime_checkable
class AudioCue(Protocol):
    """A fire-and-forget sound."""

    def play(self) -> None: ...


@runtime_checkable
class PermissionProvider(Protocol):
    """A channel that needs the user's consent before showing out-of-app alerts."""

    async def request_permission(self) -> bool:
        """Ask for permission. True if out-of-app alerts may be shown."""
        ...


class Notifier(Protocol):
    """What the reminder scheduler needs from the notification layer."""

    def notify(self, alert: ReminderAlert) -> bool: ...

    def play_cue(self) -> None: ...

    async def request_permission(self) -> bool: ...
