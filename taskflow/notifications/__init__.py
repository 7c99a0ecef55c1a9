"""Notification layer: alert channels, audio cue, and the router."""

from taskflow.notifications.channels import (
    AlertChannel,
    AudioCue,
    Notifier,
    PermissionProvider,
    ReminderAlert,
)
from taskflow.notifications.console_channel import ConsoleChannel, TerminalBell
from taskflow.notifications.desktop_channel import DesktopChannel
from taskflow.notifications.router import NotificationRouter

__all__ = [
    "AlertChannel",
    "AudioCue",
    "ConsoleChannel",
    "DesktopChannel",
    "NotificationRouter",
    "Notifier",
    "PermissionProvider",
    "ReminderAlert",
    "TerminalBell",
]
