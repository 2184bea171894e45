"""Next-occurrence calculation for recurring tasks.

The next occurrence is a stored prediction only: nothing creates a new task
when it passes. It is recomputed from the task's current due date every time
the task is saved.
"""

import calendar
from datetime import datetime, timedelta
from typing import Optional

from tasktracker.models.task_model import RECURRENCE_PATTERNS


def add_months(value: datetime, months: int) -> datetime:
    """Shift ``value`` by whole calendar months.

    A day that does not exist in the target month is clamped to that month's
    last day, so Jan 31 + 1 month is Feb 28 (Feb 29 in leap years).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_occurrence(due_date, pattern, is_recurring=True) -> Optional[datetime]:
    if not is_recurring or not pattern or due_date is None:
        return None
    if pattern == "daily":
        return due_date + timedelta(days=1)
    if pattern == "weekly":
        return due_date + timedelta(days=7)
    if pattern == "monthly":
        return add_months(due_date, 1)
    return None


def apply_recurrence(task):
    """Bring a task's recurrence fields in line before it is saved.

    Non-recurring tasks lose their pattern and next occurrence; recurring ones
    get the next occurrence derived from their current due date.
    """
    if not task.is_recurring:
        task.recurrence_pattern = ""
        task.next_occurrence = None
        return task
    if task.recurrence_pattern not in RECURRENCE_PATTERNS:
        raise ValueError(f"unknown recurrence pattern: {task.recurrence_pattern!r}")
    task.next_occurrence = next_occurrence(task.due_date, task.recurrence_pattern)
    return task
