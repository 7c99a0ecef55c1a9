"""Taskflow: personal to-do manager with deadline reminders."""
