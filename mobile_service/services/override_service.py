# mobile_service/services/override_service.py
"""
Date Override Store: per-date exceptions to the weekly template.
Rows are keyed by (technician, date, slot); writing an existing key replaces
its is_available flag instead of inserting a duplicate.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mobile_service.exceptions import InvalidRequestError
from mobile_service.models.date_override import DateOverrideEntry
from mobile_service.utils.logger import get_logger
from mobile_service.utils.time_slots import normalize_time_slot, parse_calendar_date

logger = get_logger(__name__)


@dataclass
class OverrideSlot:
    date: str
    time_slot: str
    is_available: bool = True


def list_overrides(db: Session, technician_id: str, from_date: Optional[str] = None) -> list[DateOverrideEntry]:
    q = db.query(DateOverrideEntry).filter(DateOverrideEntry.mechanic_id == technician_id)
    if from_date:
        parse_calendar_date(from_date)
        q = q.filter(DateOverrideEntry.date >= from_date)
    return q.order_by(DateOverrideEntry.date, DateOverrideEntry.time_slot).all()


def _upsert(db: Session, technician_id: str, slot: OverrideSlot) -> DateOverrideEntry:
    parse_calendar_date(slot.date)
    if not slot.time_slot:
        raise InvalidRequestError("timeSlot is required")
    time_slot = normalize_time_slot(slot.time_slot)

    # Rows saved before normalization may still carry the raw spelling
    row = db.query(DateOverrideEntry).filter(
        DateOverrideEntry.mechanic_id == technician_id,
        DateOverrideEntry.date == slot.date,
        DateOverrideEntry.time_slot.in_({slot.time_slot, time_slot}),
    ).first()
    if row:
        row.is_available = slot.is_available
    else:
        row = DateOverrideEntry(mechanic_id=technician_id, date=slot.date,
                                time_slot=time_slot, is_available=slot.is_available)
        db.add(row)
    return row


def upsert_override(db: Session, technician_id: str, slot: OverrideSlot) -> DateOverrideEntry:
    row = _upsert(db, technician_id, slot)
    db.commit()
    db.refresh(row)
    logger.info(f"[OVERRIDE] {technician_id} {slot.date} {row.time_slot} available={row.is_available}")
    return row


def upsert_overrides(db: Session, technician_id: str, slots: Iterable[OverrideSlot]) -> list[DateOverrideEntry]:
    """Batch upsert. All rows are validated and written in one commit, or none are."""
    rows = []
    try:
        for slot in slots:
            rows.append(_upsert(db, technician_id, slot))
            db.flush()
        db.commit()
    except (InvalidRequestError, SQLAlchemyError):
        db.rollback()
        raise
    for row in rows:
        db.refresh(row)
    logger.info(f"[OVERRIDE] {technician_id} batch of {len(rows)} date overrides saved")
    return rows


def delete_override(db: Session, technician_id: str, date: str, time_slot: str) -> int:
    """Remove one override. Matches the slot as stored and in normalized form."""
    parse_calendar_date(date)
    candidates = {time_slot, normalize_time_slot(time_slot)}
    deleted = db.query(DateOverrideEntry).filter(
        DateOverrideEntry.mechanic_id == technician_id,
        DateOverrideEntry.date == date,
        DateOverrideEntry.time_slot.in_(candidates),
    ).delete(synchronize_session=False)
    db.commit()
    return deleted
