"""NotificationRouter: singleton that fans alerts out to registered channels."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskflow.notifications.channels import PermissionProvider

if TYPE_CHECKING:
    from taskflow.notifications.channels import AlertChannel, AudioCue, ReminderAlert

logger = logging.getLogger(__name__)


class NotificationRouter:
    """Delivers each alert to every registered channel, plus an optional sound.

    Channels are isolated from one another: a channel that fails or declines
    does not stop the others from being tried.

    Singleton accessed via ``NotificationRouter.get()``.
    """

    _instance: NotificationRouter | None = None

    def __init__(self) -> None:
        self._channels: dict[str, AlertChannel] = {}
        self._audio_cue: AudioCue | None = None

    @classmethod
    def get(cls) -> NotificationRouter:
        """Return the singleton instance, creating it if needed."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset singleton, for tests only."""
        cls._instance = None

    def register_channel(self, channel: AlertChannel) -> None:
        """Register an alert channel. Raises ValueError on duplicate name."""
        if channel.name in self._channels:
            msg = f"Channel '{channel.name}' is already registered"
            raise ValueError(msg)
        self._channels[channel.name] = channel

    def get_channel(self, name: str) -> AlertChannel | None:
        """Look up a channel by name."""
        return self._channels.get(name)

    def list_channels(self) -> list[str]:
        """Return names of all registered channels."""
        return list(self._channels.keys())

    def set_audio_cue(self, cue: AudioCue | None) -> None:
        self._audio_cue = cue

    def notify(self, alert: ReminderAlert) -> bool:
        """Show *alert* on every channel. True if at least one showed it."""
        if not self._channels:
            logger.warning("No channels registered for alert '%s'", alert.title)
            return False
        delivered = False
        for channel in self._channels.values():
            try:
                shown = channel.show(alert)
            except Exception:
                logger.exception("Channel '%s' failed to show alert", channel.name)
                shown = False
            delivered = delivered or shown
        return delivered

    def play_cue(self) -> None:
        """Play the audio cue, if any. Failures are logged and swallowed."""
        if self._audio_cue is None:
            return
        try:
            self._audio_cue.play()
        except Exception:
            logger.exception("Audio cue failed")

    async def request_permission(self) -> bool:
        """Ask every permission-gated channel. True if any granted.

        Resolves to False straight away when no channel needs permission.
        """
        providers = [ch for ch in self._channels.values() if isinstance(ch, PermissionProvider)]
        if not providers:
            return False
        granted = False
        for provider in providers:
            try:
                granted = bool(await provider.request_permission()) or granted
            except Exception:
                logger.exception("Permission request failed for %r", provider)
        return granted
