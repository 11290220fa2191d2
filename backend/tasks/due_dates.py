"""Due-date utilities.

Contains utilities for:
- normalizing instants to local calendar days,
- computing the calendar-day offset between a due date and "now",
- classifying a due date into a display label and a severity bucket.

Comparisons are made on calendar days, not elapsed time: a task due at 08:00
is still "Due today" at 15:00 the same day.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from typing import Any, Optional, Union

from django.utils import timezone
from django.utils.dateparse import parse_datetime

ONE_DAY = timedelta(days=1)


class Severity(str, Enum):
    OVERDUE = "overdue"
    SOON = "soon"
    NORMAL = "normal"


@dataclass(frozen=True)
class DueDateStatus:
    label: str
    severity: Severity
    diff_days: int


def _ensure_datetime(value: Union[datetime, str]) -> datetime:
    """Normalize an input to a `datetime.datetime`.

    Accepts:
      - datetime instance -> returned unchanged
      - ISO 8601 date-time string (e.g. '2026-03-15T08:00:00.000Z')
      - raises ValueError for anything else
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is None:
            raise ValueError(f"Invalid date string: {value!r}")
        return parsed
    raise ValueError(f"Invalid date type: {type(value)}")


def to_local(value: Union[datetime, str], tz: Optional[tzinfo] = None) -> datetime:
    """Return `value` expressed in the local zone.

    Aware values are converted to `tz` (the active Django time zone by
    default); naive values are read as wall-clock time in that zone.
    """
    value = _ensure_datetime(value)
    tz = tz or timezone.get_current_timezone()
    if timezone.is_naive(value):
        return timezone.make_aware(value, tz)
    return value.astimezone(tz)


def start_of_day(value: Union[datetime, str], tz: Optional[tzinfo] = None) -> datetime:
    """Local midnight of the calendar day containing `value`.

    Always returns a new object; the argument is left untouched.
    """
    return to_local(value, tz).replace(hour=0, minute=0, second=0, microsecond=0)


def diff_calendar_days(
    due: Union[datetime, str],
    now: Union[datetime, str],
    tz: Optional[tzinfo] = None,
) -> int:
    """Number of calendar days from `now` to `due` (negative if overdue)."""
    delta = start_of_day(due, tz) - start_of_day(now, tz)
    # round() absorbs the 23/25 hour days around DST changes
    return round(delta / ONE_DAY)


def format_short_date(value: Union[datetime, str], tz: Optional[tzinfo] = None) -> str:
    """'Mar 17' style date of the (non-truncated) instant."""
    local = to_local(value, tz)
    return f"{local:%b} {local.day}"


def format_long_date(value: Union[datetime, str], tz: Optional[tzinfo] = None) -> str:
    """'March 17, 2026' style date, used on the detail page."""
    local = to_local(value, tz)
    return f"{local:%B} {local.day}, {local.year}"


def due_label(diff_days: int, due: Union[datetime, str], tz: Optional[tzinfo] = None) -> str:
    if diff_days < 0:
        return "Overdue"
    if diff_days == 0:
        return "Due today"
    if diff_days == 1:
        return "Due tomorrow"
    return format_short_date(due, tz)


def due_severity(diff_days: int) -> Severity:
    if diff_days < 0:
        return Severity.OVERDUE
    if diff_days <= 1:
        return Severity.SOON
    return Severity.NORMAL


def classify(
    due: Union[datetime, str],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DueDateStatus:
    """Classify a due date relative to `now` (defaults to the current time).

    Returns a DueDateStatus whose label is one of "Overdue", "Due today",
    "Due tomorrow" or a short date, and whose severity drives coloring:
      - overdue: before today
      - soon: today or tomorrow
      - normal: anything later
    """
    now = now or timezone.now()
    diff_days = diff_calendar_days(due, now, tz)
    return DueDateStatus(
        label=due_label(diff_days, due, tz),
        severity=due_severity(diff_days),
        diff_days=diff_days,
    )


def due_date_status(task: Any, now: Optional[datetime] = None) -> Optional[DueDateStatus]:
    """Classify `task.due_date`, or None when the task has no due date."""
    if task.due_date is None:
        return None
    return classify(task.due_date, now)
