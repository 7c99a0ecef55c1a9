"""Reminder offsets: named lead times before a todo's due date."""

from __future__ import annotations

from datetime import timedelta
from typing import NamedTuple


class ReminderOffset(NamedTuple):
    label: str
    lead_time: timedelta


class ReminderKey(NamedTuple):
    """Identity of one reminder firing. The due date is not part of it."""

    todo_id: str
    label: str


DEADLINE_LABEL = "Deadline"

REMINDER_OFFSETS: tuple[ReminderOffset, ...] = (
    ReminderOffset("1 day before", timedelta(days=1)),
    ReminderOffset("1 hour before", timedelta(hours=1)),
    ReminderOffset("30 minutes before", timedelta(minutes=30)),
    ReminderOffset(DEADLINE_LABEL, timedelta(0)),
)


def urgent_labels(offsets: tuple[ReminderOffset, ...]) -> frozenset[str]:
    """Labels that alert urgently: the deadline itself and the shortest lead time before it."""
    urgent = {o.label for o in offsets if o.lead_time <= timedelta(0)}
    leads = [o.lead_time for o in offsets if o.lead_time > timedelta(0)]
    if leads:
        shortest = min(leads)
        urgent.update(o.label for o in offsets if o.lead_time == shortest)
    return frozenset(urgent)
