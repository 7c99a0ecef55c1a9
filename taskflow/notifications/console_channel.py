"""In-app console banner and terminal bell, rendered with rich."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.panel import Panel

from taskflow.config import settings
from taskflow.notifications.channels import ReminderAlert

logger = logging.getLogger(__name__)


class ConsoleChannel:
    """Prints reminders as a banner in the running terminal.

    Needs no permission, so it is always attempted even when desktop
    notifications are unavailable.
    """

    def __init__(self, console: Console | None = None, *, enabled: bool | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._enabled = settings.console_alerts_enabled if enabled is None else enabled

    @property
    def name(self) -> str:
        return "console"

    def show(self, alert: ReminderAlert) -> bool:
        if not self._enabled:
            return False
        try:
            self._console.print(
                Panel(
                    alert.body,
                    title=f"⏰ {alert.title}",
                    title_align="left",
                    border_style="bold red" if alert.urgent else "cyan",
                    expand=False,
                )
            )
            return True
        except Exception:
            logger.exception("ConsoleChannel.show failed for '%s'", alert.title)
            return False


class TerminalBell:
    """Audio cue: rings the terminal bell a few times in a row."""

    def __init__(
        self,
        console: Console | None = None,
        *,
        rings: int = 3,
        enabled: bool | None = None,
    ) -> None:
        self._console = console or Console(stderr=True)
        self._rings = max(1, rings)
        self._enabled = settings.sound_enabled if enabled is None else enabled

    def play(self) -> None:
        if not self._enabled:
            return
        for _ in range(self._rings):
            self._console.bell()
