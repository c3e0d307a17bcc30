"""
View-projection helpers.

Pure functions that map tasks onto the values the dashboard renders:
priority and status badges, the overdue flag, and the relative due-date
phrase.  They hold the business rule for "overdue" in one place so the
repository filters and the templates agree.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any, NamedTuple

from .models import Task, TaskPriority, TaskStatus, utc_now


class BadgeInfo(NamedTuple):
    """Label, CSS colour and icon for a priority or status badge."""

    label: str
    color: str
    icon: str


PRIORITY_LABELS: dict[TaskPriority, BadgeInfo] = {
    TaskPriority.LOW: BadgeInfo("Low Priority", "#28a745", "\U0001F7E2"),
    TaskPriority.MEDIUM: BadgeInfo("Medium Priority", "#ffc107", "\U0001F7E1"),
    TaskPriority.HIGH: BadgeInfo("High Priority", "#dc3545", "\U0001F534"),
    TaskPriority.URGENT: BadgeInfo("Urgent", "#ff4444", "\U0001F525"),
}

STATUS_LABELS: dict[TaskStatus, BadgeInfo] = {
    TaskStatus.TODO: BadgeInfo("To Do", "#6c757d", "⏳"),
    TaskStatus.IN_PROGRESS: BadgeInfo("In Progress", "#007bff", "\U0001F504"),
    TaskStatus.DONE: BadgeInfo("Done", "#28a745", "✅"),
}

SECONDS_PER_DAY = 24 * 60 * 60


def priority_info(priority: Any) -> BadgeInfo:
    """Return the badge for *priority*; unknown values fall back to MEDIUM."""
    try:
        return PRIORITY_LABELS[TaskPriority(int(priority))]
    except (TypeError, ValueError):
        return PRIORITY_LABELS[TaskPriority.MEDIUM]


def status_info(status: Any) -> BadgeInfo:
    """Return the badge for *status*; unknown values fall back to TODO."""
    try:
        return STATUS_LABELS[TaskStatus(status)]
    except ValueError:
        return STATUS_LABELS[TaskStatus.TODO]


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_due_before(task: Task, as_of: date | datetime) -> bool:
    """
    Return True when *task* is open and its due date precedes *as_of*.

    Comparison is date-only; tasks without a due date are never overdue.
    """
    if task.status is TaskStatus.DONE or task.due_date is None:
        return False
    return task.due_date < _as_date(as_of)


def is_overdue(task: Task, now: date | datetime | None = None) -> bool:
    """Return True when *task* is not DONE and was due before today."""
    if now is None:
        now = utc_now()
    return is_due_before(task, now)


def days_until(due_date: date, now: date | datetime) -> int:
    """
    Return the calendar-day distance from *now* to *due_date*.

    The due date counts from its midnight; fractional days are rounded
    up, so anything later on the due day itself yields ``0``.
    """
    if not isinstance(now, datetime):
        return (due_date - now).days
    due_start = datetime.combine(due_date, time.min, tzinfo=now.tzinfo)
    seconds = (due_start - now).total_seconds()
    return int(math.ceil(seconds / SECONDS_PER_DAY))


def format_due_date_phrase(due_date: date, now: date | datetime | None = None) -> str:
    """
    Describe *due_date* relative to *now*.

    Examples:
        ``"Overdue by 4 days"``, ``"Due today"``, ``"Due tomorrow"``,
        ``"Due in 3 days"``.
    """
    if now is None:
        now = utc_now()
    days = days_until(due_date, now)
    if days < 0:
        overdue = abs(days)
        return f"Overdue by {overdue} day" if overdue == 1 else f"Overdue by {overdue} days"
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    return f"Due in {days} days"


def task_view(task: Task, now: date | datetime | None = None) -> dict[str, Any]:
    """Flatten a task plus its derived display values for templates."""
    if now is None:
        now = utc_now()
    return {
        "task": task,
        "priority": priority_info(task.priority),
        "status": status_info(task.status),
        "overdue": is_overdue(task, now),
        "due_phrase": format_due_date_phrase(task.due_date, now) if task.due_date else "",
    }
