"""Deadline reminders: offsets, clock, and the reminder scheduler."""

from taskflow.reminders.clock import APSchedulerClock, Clock, ServiceClock, TimerHandle
from taskflow.reminders.offsets import REMINDER_OFFSETS, ReminderKey, ReminderOffset
from taskflow.reminders.scheduler import ReminderScheduler

__all__ = [
    "REMINDER_OFFSETS",
    "APSchedulerClock",
    "Clock",
    "ReminderKey",
    "ReminderOffset",
    "ReminderScheduler",
    "ServiceClock",
    "TimerHandle",
]
