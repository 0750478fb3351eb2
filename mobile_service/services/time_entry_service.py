# mobile_service/services/time_entry_service.py
"""
Technician clock-in / clock-out.

A technician has at most one open entry. The check happens in the same
transaction as the insert, and the partial unique index on open entries
catches a concurrent second check-in that slipped past it.
Weeks start on Sunday, matching the availability calendar.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_service.exceptions import StateConflictError
from mobile_service.models.technician import Technician
from mobile_service.models.time_entry import TimeEntry
from mobile_service.utils.logger import get_logger

logger = get_logger(__name__)


def week_start(day: date) -> datetime:
    """Midnight of the Sunday on or before `day`."""
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return datetime.combine(sunday, datetime.min.time())


def current_entry(db: Session, technician_id: str) -> Optional[TimeEntry]:
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.mechanic_id == technician_id, TimeEntry.check_out_time.is_(None))
        .first()
    )


def check_in(db: Session, technician_id: str, now: Optional[datetime] = None) -> TimeEntry:
    if current_entry(db, technician_id):
        raise StateConflictError("Already checked in")

    entry = TimeEntry(mechanic_id=technician_id, check_in_time=now or datetime.utcnow())
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise StateConflictError("Already checked in")
    db.refresh(entry)
    logger.info(f"[TIME] Technician {technician_id} checked in at {entry.check_in_time:%H:%M}")
    return entry


def check_out(db: Session, technician_id: str, now: Optional[datetime] = None) -> TimeEntry:
    entry = current_entry(db, technician_id)
    if not entry:
        raise StateConflictError("Not checked in")

    entry.check_out_time = now or datetime.utcnow()
    db.commit()
    db.refresh(entry)
    logger.info(
        f"[TIME] Technician {technician_id} checked out after "
        f"{(entry.check_out_time - entry.check_in_time).total_seconds() / 3600:.2f} h"
    )
    return entry


def list_entries(db: Session, technician_id: str, since: Optional[datetime] = None) -> list[TimeEntry]:
    """Entries checked in on or after `since` (default: start of the current week), newest first."""
    since = since or week_start(datetime.utcnow().date())
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.mechanic_id == technician_id, TimeEntry.check_in_time >= since)
        .order_by(TimeEntry.check_in_time.desc())
        .all()
    )


def hours_worked(entries: list[TimeEntry], now: Optional[datetime] = None) -> float:
    """Sum of entry durations in hours; an open entry counts up to `now`."""
    now = now or datetime.utcnow()
    seconds = sum(
        ((e.check_out_time or now) - e.check_in_time).total_seconds()
        for e in entries
    )
    return round(max(seconds, 0) / 3600, 2)


def weekly_hours(db: Session, technician_id: str, now: Optional[datetime] = None) -> float:
    now = now or datetime.utcnow()
    return hours_worked(list_entries(db, technician_id, since=week_start(now.date())), now=now)


def clock_overview(db: Session, now: Optional[datetime] = None) -> list[dict]:
    """Manager view: every technician with clock status and hours this week."""
    now = now or datetime.utcnow()
    overview = []
    for technician in db.query(Technician).order_by(Technician.name).all():
        open_entry = current_entry(db, technician.id)
        overview.append({
            "technician": technician,
            "is_clocked_in": open_entry is not None,
            "current_check_in_time": open_entry.check_in_time.isoformat() if open_entry else None,
            "weekly_hours": weekly_hours(db, technician.id, now=now),
        })
    return overview
