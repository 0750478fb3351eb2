# mobile_service/utils/time_slots.py
"""
Time-slot and calendar-date helpers.

Slots are human-entered 12-hour strings ("8:00 AM", "08:00 am"). Every place
that groups or compares slots goes through normalize_time_slot() so that
differently formatted spellings of the same slot coalesce into one key.
"""

import re
from datetime import date, datetime, time
from typing import Optional

from mobile_service.exceptions import InvalidRequestError

_SLOT_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})\s(AM|PM)$", re.IGNORECASE)
_DATE_FORMAT = "%Y-%m-%d"


def normalize_time_slot(raw: str) -> str:
    """
    Canonical form: zero-padded hour, original minutes, upper-case marker.
    "8:00 am" → "08:00 AM". Input that does not look like H(H):MM AM|PM is
    returned unchanged. Idempotent.
    """
    if not isinstance(raw, str):
        return raw
    match = _SLOT_PATTERN.match(raw)
    if not match:
        return raw
    hour, minute, marker = match.groups()
    return f"{int(hour):02d}:{minute} {marker.upper()}"


def slot_start_time(slot: str) -> Optional[time]:
    """24-hour start time of a slot, or None when the slot is not in H:MM AM|PM form."""
    match = _SLOT_PATTERN.match(slot or "")
    if not match:
        return None
    hour, minute, marker = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if hour > 12 or minute > 59:
        return None
    if marker == "PM" and hour != 12:
        hour += 12
    elif marker == "AM" and hour == 12:
        hour = 0
    return time(hour, minute)


def parse_calendar_date(value: str) -> date:
    """Strict YYYY-MM-DD parse. Raises InvalidRequestError on anything else."""
    try:
        return datetime.strptime(value, _DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidRequestError(f"Invalid date '{value}', expected YYYY-MM-DD")


def format_calendar_date(value: date) -> str:
    return value.strftime(_DATE_FORMAT)


def day_of_week(value: str) -> int:
    """0=Sunday … 6=Saturday, from the calendar date alone (no timezone involved)."""
    # date.weekday() is 0=Monday
    return (parse_calendar_date(value).weekday() + 1) % 7


def slot_sort_key(slot: str, ordering: list[str]) -> tuple:
    """Configured slots first in configured order, then anything else by clock time."""
    normalized = normalize_time_slot(slot)
    if normalized in ordering:
        return (0, ordering.index(normalized), "")
    start = slot_start_time(normalized)
    return (1, start.hour * 60 + start.minute if start else 24 * 60, normalized)
