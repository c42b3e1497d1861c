"""Due-date classification for TickTick tasks.

These functions operate on task dicts returned by the TickTick API.
They are pure functions (no I/O) for easy testing; the reference
instant defaults to the current UTC time.

TickTick stores due dates one calendar day behind what the user picked,
so every due date is shifted forward by one day (the D+1 adjustment)
before it is compared.

Known discrepancy: is_overdue() accepts a timezone offset (default 8
hours) but does not apply it to either the all-day or the timed
comparison. Callers may pass it; it has no effect.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone, date, timedelta

DUE_DATE_ADJUSTMENT = timedelta(days=1)
DEFAULT_TIMEZONE_OFFSET_HOURS = 8

_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_date(date_str: str | None) -> datetime | None:
    """Parse a TickTick date string to an aware UTC datetime. None if unparseable."""
    if not date_str or not isinstance(date_str, str):
        return None
    try:
        # TickTick uses format like "2026-02-13T09:00:00+0000"
        # Also handles "2026-02-13T09:00:00.000+0000" and "...Z"
        cleaned = date_str.strip().replace(".000", "")
        if cleaned.endswith("Z"):
            cleaned = cleaned[:-1] + "+00:00"
        if "T" in cleaned:
            cleaned = _COMPACT_OFFSET.sub(r"\1:\2", cleaned)
        parsed = datetime.fromisoformat(cleaned)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_all_day(task: dict) -> bool:
    """Only allDay is consulted; isAllDay tasks classify as timed."""
    return bool(task.get("allDay", False))


def _adjusted_due(task: dict) -> datetime | None:
    if task.get("completedTime"):
        return None
    due = parse_date(task.get("dueDate"))
    if due is None:
        return None
    try:
        return due + DUE_DATE_ADJUSTMENT
    except OverflowError:
        return None


def _utc_date(moment: datetime) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date()


def is_due_today(task: dict, now: datetime | None = None) -> bool:
    """True when the adjusted due date falls on the same UTC day as now.

    All-day and timed tasks are treated alike. Completed tasks and tasks
    without a (parseable) due date are never due today.
    """
    adjusted = _adjusted_due(task)
    if adjusted is None:
        return False
    now = now or datetime.now(timezone.utc)
    return _utc_date(adjusted) == _utc_date(now)


def is_overdue(
    task: dict,
    now: datetime | None = None,
    timezone_offset_hours: int = DEFAULT_TIMEZONE_OFFSET_HOURS,
) -> bool:
    """True when the adjusted due date is in the past.

    All-day tasks compare UTC calendar dates (strictly before today);
    timed tasks compare instants. timezone_offset_hours is not applied.
    """
    adjusted = _adjusted_due(task)
    if adjusted is None:
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if is_all_day(task):
        return _utc_date(adjusted) < _utc_date(now)
    return adjusted < now


def filter_due_today(tasks: list[dict], now: datetime | None = None) -> list[dict]:
    """Return tasks due today, in their original order."""
    now = now or datetime.now(timezone.utc)
    return [t for t in tasks if is_due_today(t, now)]


def filter_overdue_tasks(
    tasks: list[dict],
    now: datetime | None = None,
    timezone_offset_hours: int = DEFAULT_TIMEZONE_OFFSET_HOURS,
) -> list[dict]:
    """Return overdue tasks, in their original order."""
    now = now or datetime.now(timezone.utc)
    return [t for t in tasks if is_overdue(t, now, timezone_offset_hours)]
