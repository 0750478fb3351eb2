# mobile_service/services/schedule_service.py
"""
Recurring Schedule Store: the weekly background layer of availability.

A technician's template is always replaced as a whole: every existing row for
that technician is deleted and the new set inserted inside one transaction, so
no reader ever sees a half-written week and stale slots never linger.
"""

from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mobile_service.exceptions import InvalidRequestError
from mobile_service.models.recurring_schedule import RecurringScheduleEntry
from mobile_service.services.technician_service import get_technician_or_404
from mobile_service.utils.logger import get_logger
from mobile_service.utils.time_slots import normalize_time_slot

logger = get_logger(__name__)


@dataclass
class RecurringSlot:
    day_of_week: int
    time_slot: str
    is_available: bool


def get_recurring_schedule(db: Session, technician_id: str) -> list[RecurringScheduleEntry]:
    return (
        db.query(RecurringScheduleEntry)
        .filter(RecurringScheduleEntry.mechanic_id == technician_id)
        .order_by(RecurringScheduleEntry.day_of_week, RecurringScheduleEntry.time_slot)
        .all()
    )


def _validate(slots: Iterable[RecurringSlot]) -> list[RecurringSlot]:
    # Last write wins when the same weekday/slot appears twice in one batch
    deduped: dict[tuple[int, str], RecurringSlot] = {}
    for slot in slots:
        day = slot.day_of_week
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise InvalidRequestError("dayOfWeek must be 0-6")
        if not slot.time_slot or not isinstance(slot.time_slot, str):
            raise InvalidRequestError("timeSlot is required")
        if not isinstance(slot.is_available, bool):
            raise InvalidRequestError("isAvailable must be boolean")
        key = (slot.day_of_week, normalize_time_slot(slot.time_slot))
        deduped[key] = RecurringSlot(key[0], key[1], slot.is_available)
    return list(deduped.values())


def replace_recurring_schedule(db: Session, technician_id: str,
                               slots: Iterable[RecurringSlot]) -> list[RecurringScheduleEntry]:
    """Delete-then-insert the technician's whole weekly template in one transaction."""
    get_technician_or_404(db, technician_id)
    cleaned = _validate(slots)

    try:
        db.query(RecurringScheduleEntry).filter(
            RecurringScheduleEntry.mechanic_id == technician_id
        ).delete(synchronize_session=False)
        db.add_all([
            RecurringScheduleEntry(
                mechanic_id=technician_id,
                day_of_week=s.day_of_week,
                time_slot=s.time_slot,
                is_available=s.is_available,
            )
            for s in cleaned
        ])
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"[SCHEDULE] Replace failed for technician {technician_id}, rolled back", exc_info=True)
        raise

    logger.info(f"[SCHEDULE] Technician {technician_id} weekly template replaced ({len(cleaned)} slots)")
    return get_recurring_schedule(db, technician_id)
