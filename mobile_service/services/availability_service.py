# mobile_service/services/availability_service.py
"""
Availability Resolver: which technicians can take which slot on a date.

Two layers feed the result:
  - recurring template rows for the date's weekday (0=Sunday … 6=Saturday)
  - date override rows for that exact calendar date

Only rows with is_available = true are read from either layer, and the layers
are UNIONED: an explicit is_available = false override does not hide a
technician whom the weekly template marks available. Slot strings are
normalized at read time, so "8:00 AM" and "08:00 AM" land in one bucket.
A slot with no technician is simply absent from the result.
"""

import enum
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.orm import Session

from mobile_service.config import settings
from mobile_service.models.date_override import DateOverrideEntry
from mobile_service.models.recurring_schedule import RecurringScheduleEntry
from mobile_service.models.technician import Technician
from mobile_service.utils.logger import get_logger
from mobile_service.utils.time_slots import (
    day_of_week, normalize_time_slot, parse_calendar_date, slot_sort_key,
)

logger = get_logger(__name__)


class AvailabilitySource(str, enum.Enum):
    RECURRING = "recurring"
    OVERRIDE = "override"


@dataclass(frozen=True)
class AvailabilityRow:
    """One availability fact from either layer, in a single shape."""
    source: AvailabilitySource
    technician: Technician
    time_slot: str
    is_available: bool


def _recurring_rows(db: Session, weekday: int) -> list[AvailabilityRow]:
    q = (
        db.query(RecurringScheduleEntry, Technician)
        .join(Technician, Technician.id == RecurringScheduleEntry.mechanic_id)
        .filter(
            RecurringScheduleEntry.day_of_week == weekday,
            RecurringScheduleEntry.is_available.is_(True),
        )
    )
    return [
        AvailabilityRow(AvailabilitySource.RECURRING, tech, entry.time_slot, entry.is_available)
        for entry, tech in q.all()
    ]


def _override_rows(db: Session, date: str) -> list[AvailabilityRow]:
    q = (
        db.query(DateOverrideEntry, Technician)
        .join(Technician, Technician.id == DateOverrideEntry.mechanic_id)
        .filter(
            DateOverrideEntry.date == date,
            DateOverrideEntry.is_available.is_(True),
        )
    )
    return [
        AvailabilityRow(AvailabilitySource.OVERRIDE, tech, entry.time_slot, entry.is_available)
        for entry, tech in q.all()
    ]


def group_by_slot(rows: Iterable[AvailabilityRow]) -> dict[str, list[Technician]]:
    """Normalize each row's slot, bucket by it, keep each technician once per bucket."""
    grouped: dict[str, dict[str, Technician]] = {}
    for row in rows:
        if not row.is_available:
            continue
        bucket = grouped.setdefault(normalize_time_slot(row.time_slot), {})
        bucket.setdefault(row.technician.id, row.technician)
    return {slot: list(techs.values()) for slot, techs in grouped.items() if techs}


def resolve_availability(db: Session, date: str) -> dict[str, list[Technician]]:
    """{normalized slot → eligible technicians} for one calendar date."""
    weekday = day_of_week(date)
    rows = _recurring_rows(db, weekday) + _override_rows(db, date)
    result = group_by_slot(rows)
    logger.debug(f"[AVAILABILITY] {date} (dow={weekday}): {len(rows)} rows → {len(result)} open slots")
    return result


def technicians_for_slot(db: Session, date: str, raw_slot: str) -> list[Technician]:
    """
    Eligible technicians for one date + slot. The override layer is searched
    under both the normalized and the original spelling, in case a row was
    saved before normalization existed.
    """
    weekday = day_of_week(date)
    normalized = normalize_time_slot(raw_slot)

    # Stored rows may hold any spelling of the slot, so match after normalizing
    recurring = [r for r in _recurring_rows(db, weekday)
                 if normalize_time_slot(r.time_slot) == normalized]
    overrides = [r for r in _override_rows(db, date)
                 if r.time_slot in (normalized, raw_slot)
                 or normalize_time_slot(r.time_slot) == normalized]

    # Everything is bucketed under the normalized key, raw-spelled matches included
    merged = [AvailabilityRow(r.source, r.technician, normalized, r.is_available)
              for r in recurring + overrides]
    return group_by_slot(merged).get(normalized, [])


def is_technician_eligible(db: Session, date: str, raw_slot: str, technician_id: str) -> bool:
    return any(t.id == technician_id for t in technicians_for_slot(db, date, raw_slot))


def available_slots(db: Session, date: str) -> list[dict]:
    """
    Resolver output as an ordered list for the booking form:
    [{"time_slot": "08:00 AM", "technicians": [Technician, ...]}, ...]
    """
    parse_calendar_date(date)
    resolved = resolve_availability(db, date)
    ordered = sorted(resolved, key=lambda s: slot_sort_key(s, settings.TIME_SLOTS))
    return [
        {"time_slot": slot, "technicians": sorted(resolved[slot], key=lambda t: t.name or "")}
        for slot in ordered
    ]
