"""Desktop (system tray) implementation of the AlertChannel protocol."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any

from plyer import notification
from plyer.utils import platform

from taskflow.config import settings
from taskflow.notifications.channels import ReminderAlert

logger = logging.getLogger(__name__)

# Platforms for which plyer ships a notification backend
_SUPPORTED_PLATFORMS = frozenset({"win", "linux", "macosx", "android"})


class DesktopChannel:
    """Shows system notifications via plyer, once permission has been granted."""

    def __init__(
        self,
        *,
        enabled: bool | None = None,
        backend: Any = None,
        app_name: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self._enabled = settings.desktop_notifications_enabled if enabled is None else enabled
        self._backend = backend or notification
        self._app_name = app_name or settings.notification_app_name
        self._timeout = timeout if timeout is not None else settings.notification_timeout_seconds
        self._granted = False
        self._deliveries: set[asyncio.Future] = set()

    @property
    def name(self) -> str:
        return "desktop"

    @property
    def granted(self) -> bool:
        return self._granted

    async def request_permission(self) -> bool:
        """Grant when enabled and the platform has a notification backend."""
        if not self._enabled:
            self._granted = False
            return False
        if not self._granted:
            self._granted = await asyncio.to_thread(self._probe)
        return self._granted

    def _probe(self) -> bool:
        current = str(platform)
        if current not in _SUPPORTED_PLATFORMS:
            logger.info("Desktop notifications unsupported on platform '%s'", current)
            return False
        return True

    def show(self, alert: ReminderAlert) -> bool:
        """Show a system notification. Skipped until permission is granted.

        Inside a running event loop the backend call (a D-Bus round trip on
        Linux) is handed to the default executor and True means "dispatched";
        delivery failures are then only logged. Outside a loop it runs inline.
        """
        if not self._granted:
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return self._deliver(alert)
        future = loop.run_in_executor(None, partial(self._deliver, alert))
        self._deliveries.add(future)
        future.add_done_callback(self._deliveries.discard)
        return True

    async def drain(self) -> None:
        """Wait for notifications still being delivered in the executor."""
        if self._deliveries:
            await asyncio.gather(*self._deliveries)

    def _deliver(self, alert: ReminderAlert) -> bool:
        try:
            self._backend.notify(
                title=f"⏰ {alert.title}",
                message=alert.body,
                app_name=self._app_name,
                timeout=self._timeout,
            )
            return True
        except Exception:
            logger.exception("DesktopChannel.show failed for '%s'", alert.title)
            return False
