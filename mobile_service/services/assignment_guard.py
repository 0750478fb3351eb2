# mobile_service/services/assignment_guard.py
"""
Slot Occupancy Guard: run before a technician is tied to a date/slot.

Policy:
  - customer booking without a technician: the slot must be offered by the
    availability resolver for that date, otherwise SlotUnavailableError.
  - customer booking with a technician: the technician must be eligible per
    the availability resolver AND not already hold an active job in that
    slot, otherwise SlotUnavailableError.
  - manager assignment: an ineligible technician is allowed (forced
    assignment, logged), but double-booking is not.
The partial unique index on appointments backs the double-booking rule at the
store level for requests that race past these checks.
"""

from typing import Optional

from sqlalchemy.orm import Session

from mobile_service.models.appointment import ACTIVE_STATUSES, Appointment
from mobile_service.exceptions import SlotUnavailableError
from mobile_service.services.availability_service import is_technician_eligible, resolve_availability
from mobile_service.utils.logger import get_logger
from mobile_service.utils.time_slots import normalize_time_slot

logger = get_logger(__name__)


def active_job_in_slot(db: Session, technician_id: str, date: str, time_slot: str,
                       exclude_appointment_id: Optional[str] = None) -> Optional[Appointment]:
    q = db.query(Appointment).filter(
        Appointment.mechanic_id == technician_id,
        Appointment.date == date,
        Appointment.time_slot == normalize_time_slot(time_slot),
        Appointment.status.in_(ACTIVE_STATUSES),
    )
    if exclude_appointment_id:
        q = q.filter(Appointment.id != exclude_appointment_id)
    return q.first()


def ensure_slot_open(db: Session, date: str, time_slot: str) -> None:
    """Customer-initiated booking that leaves the technician to the manager."""
    slot = normalize_time_slot(time_slot)
    if slot not in resolve_availability(db, date):
        logger.info(f"[GUARD] Rejected booking: no technician offers {date} {slot}")
        raise SlotUnavailableError(date, slot)


def ensure_bookable(db: Session, date: str, time_slot: str, technician_id: str) -> None:
    """Customer-initiated booking with a chosen technician."""
    if not is_technician_eligible(db, date, time_slot, technician_id):
        logger.info(f"[GUARD] Rejected booking: technician {technician_id} not available {date} {time_slot}")
        raise SlotUnavailableError(date, normalize_time_slot(time_slot))
    if active_job_in_slot(db, technician_id, date, time_slot):
        logger.info(f"[GUARD] Rejected booking: technician {technician_id} already booked {date} {time_slot}")
        raise SlotUnavailableError(date, normalize_time_slot(time_slot), "is already booked")


def check_manager_assignment(db: Session, appointment: Appointment, technician_id: str) -> bool:
    """
    Manager-initiated assignment. Returns True when the technician is eligible,
    False for a forced assignment. Raises only for double-booking.
    """
    if active_job_in_slot(db, technician_id, appointment.date, appointment.time_slot,
                          exclude_appointment_id=appointment.id):
        raise SlotUnavailableError(appointment.date, appointment.time_slot,
                                   "already has a job for this technician")
    eligible = is_technician_eligible(db, appointment.date, appointment.time_slot, technician_id)
    if not eligible:
        logger.warning(
            f"[GUARD] Forced assignment: technician {technician_id} is not available "
            f"{appointment.date} {appointment.time_slot} (job #{appointment.job_number})"
        )
    return eligible
