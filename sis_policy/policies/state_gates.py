"""
Resource lifecycle rules.

Pure predicates deciding whether a record is still editable, deletable,
gradeable or markable. Callers pass the current time explicitly.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from ..constants import (
    ASSIGNMENT_EDITABLE_STATUSES,
    ASSIGNMENT_SUBMITTED_STATUSES,
    ATTENDANCE_FINALIZED_STATUS,
    DEFAULT_ATTENDANCE_DELETE_DAYS,
    DEFAULT_ATTENDANCE_EDIT_HOURS,
    DEFAULT_MARKING_WINDOW_END,
    DEFAULT_MARKING_WINDOW_START,
    GRADE_DELETABLE_STATUS,
    GRADE_EDITABLE_STATUSES,
)


def parse_record_date(value: Any) -> datetime | None:
    """
    Coerce a stored attendance date into a datetime.

    Accepts datetime, date or ISO-8601 strings ("2024-01-15" or a full
    timestamp). Returns None for missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def _elapsed(since: datetime, now: datetime) -> timedelta:
    # Mixed naive/aware values are compared in the aware value's zone
    if since.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=since.tzinfo)
    elif since.tzinfo is None and now.tzinfo is not None:
        since = since.replace(tzinfo=now.tzinfo)
    return now - since


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


def assignment_editable(status: str | None) -> bool:
    return status in ASSIGNMENT_EDITABLE_STATUSES


def assignment_deletable(status: str | None) -> bool:
    return status in ASSIGNMENT_EDITABLE_STATUSES


def assignment_submitted(status: str | None) -> bool:
    return status in ASSIGNMENT_SUBMITTED_STATUSES


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


def attendance_editable(
    record_date: Any,
    now: datetime,
    window_hours: int = DEFAULT_ATTENDANCE_EDIT_HOURS,
) -> bool:
    """A record is editable for ``window_hours`` after its attendance date."""
    recorded = parse_record_date(record_date)
    if recorded is None:
        return False
    return _elapsed(recorded, now) <= timedelta(hours=window_hours)


def attendance_deletable(
    record_date: Any,
    status: str | None,
    now: datetime,
    window_days: int = DEFAULT_ATTENDANCE_DELETE_DAYS,
) -> bool:
    """A record is deletable for ``window_days`` unless it was finalized."""
    recorded = parse_record_date(record_date)
    if recorded is None:
        return False
    if status == ATTENDANCE_FINALIZED_STATUS:
        return False
    return _elapsed(recorded, now) <= timedelta(days=window_days)


def attendance_markable(
    target: datetime | date,
    now: datetime,
    window_start: int = DEFAULT_MARKING_WINDOW_START,
    window_end: int = DEFAULT_MARKING_WINDOW_END,
) -> bool:
    """Attendance can be marked only for today, during school hours."""
    target_day = target.date() if isinstance(target, datetime) else target
    if target_day != now.date():
        return False
    return window_start <= now.hour < window_end


def attendance_bulk_markable(
    target: datetime | date,
    now: datetime,
    already_marked: bool,
    window_start: int = DEFAULT_MARKING_WINDOW_START,
    window_end: int = DEFAULT_MARKING_WINDOW_END,
) -> bool:
    """Bulk marking is allowed once per class and day, inside the marking window."""
    if already_marked:
        return False
    return attendance_markable(target, now, window_start, window_end)


# ---------------------------------------------------------------------------
# Grades
# ---------------------------------------------------------------------------


def grade_editable(status: str | None) -> bool:
    return status in GRADE_EDITABLE_STATUSES


def grade_deletable(status: str | None, reported: bool | None) -> bool:
    return status == GRADE_DELETABLE_STATUS and not reported


def grade_creatable(grade_exists: bool) -> bool:
    """Only one grade row may exist per (assignment, student) pair."""
    return not grade_exists
