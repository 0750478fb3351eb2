# mobile_service/services/appointment_service.py
"""
Appointment lifecycle.

  create   (public)      → scheduled, job number issued, customer upserted
  assign   (manager)     → technician replaced, status unchanged
  start    (staff)       scheduled → in-progress
  complete (staff)       scheduled | in-progress → completed
  cancel   (public link) scheduled | in-progress → cancelled

Every write goes through one commit; a unique-index violation on commit means
another request took the technician's slot first and becomes
SlotUnavailableError. Without a technician there is no slot to lose, so
any other integrity error propagates. Notifications are the router's job,
not this module's.
"""

from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_service.auth import Caller
from mobile_service.config import settings
from mobile_service.exceptions import (
    AuthorizationError, InvalidRequestError, NotFoundError,
    SlotUnavailableError, StateConflictError,
)
from mobile_service.models.appointment import (
    Appointment, STATUS_CANCELLED, STATUS_COMPLETED,
    STATUS_IN_PROGRESS, STATUS_SCHEDULED,
)
from mobile_service.models.technician import Technician
from mobile_service.services.assignment_guard import (
    check_manager_assignment, ensure_bookable, ensure_slot_open,
)
from mobile_service.services.customer_service import upsert_customer
from mobile_service.services.job_counter import JobCounter
from mobile_service.services.technician_service import get_technician_or_404
from mobile_service.utils.logger import get_logger
from mobile_service.utils.time_slots import (
    format_calendar_date, normalize_time_slot, parse_calendar_date, slot_sort_key, slot_start_time,
)

logger = get_logger(__name__)

# Forward-only status table; cancel has its own entry point
ALLOWED_TRANSITIONS = {
    STATUS_SCHEDULED: {STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED},
    STATUS_IN_PROGRESS: {STATUS_COMPLETED, STATUS_CANCELLED},
    STATUS_COMPLETED: set(),
    STATUS_CANCELLED: set(),
}

_BOOKING_FIELDS = (
    "customer_name", "customer_email", "customer_phone", "preferred_contact_method",
    "vehicle_year", "vehicle_make", "vehicle_model", "license_plate", "license_plate_state",
    "service_type", "price", "address",
)
_PAYMENT_FIELDS = (
    "date_billed", "date_received", "is_paid", "collector", "payment_method", "payment_status",
)


def _commit_slot_write(db: Session, appointment: Appointment):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if not appointment.mechanic_id:
            raise
        logger.warning(
            f"[BOOKING] Lost race for technician {appointment.mechanic_id} "
            f"{appointment.date} {appointment.time_slot}"
        )
        raise SlotUnavailableError(appointment.date, appointment.time_slot, "is already booked")
    db.refresh(appointment)


def _check_transition(appointment: Appointment, target: str):
    if appointment.status == target:
        raise StateConflictError(f"Appointment is already {target}")
    if target not in ALLOWED_TRANSITIONS.get(appointment.status, set()):
        raise StateConflictError(f"Cannot change status from {appointment.status} to {target}")


# ── Reads ──────────────────────────────────────────────────────────────────

def get_appointment(db: Session, appointment_id: str) -> Optional[Appointment]:
    return db.query(Appointment).filter(Appointment.id == appointment_id).first()


def get_appointment_or_404(db: Session, appointment_id: str) -> Appointment:
    appointment = get_appointment(db, appointment_id)
    if not appointment:
        raise NotFoundError("Appointment not found")
    return appointment


def list_appointments(db: Session, date: Optional[str] = None, status: Optional[str] = None,
                      technician_id: Optional[str] = None) -> list[Appointment]:
    q = db.query(Appointment)
    if date:
        q = q.filter(Appointment.date == date)
    if status:
        q = q.filter(Appointment.status == status)
    if technician_id:
        q = q.filter(Appointment.mechanic_id == technician_id)
    return q.order_by(Appointment.date.desc(), Appointment.created_at.desc()).all()


def _by_visit_time(appointments: list[Appointment]) -> list[Appointment]:
    return sorted(appointments, key=lambda a: (a.date, slot_sort_key(a.time_slot, settings.TIME_SLOTS)))


def technician_jobs(db: Session, technician_id: str) -> list[Appointment]:
    return _by_visit_time(
        db.query(Appointment).filter(Appointment.mechanic_id == technician_id).all()
    )


# ── Create ─────────────────────────────────────────────────────────────────

def create_appointment(db: Session, fields: dict, counter: JobCounter) -> Appointment:
    """
    Book a service visit. `fields` uses the column names of Appointment.
    A requested technician must be available and free in the slot. Without
    one the slot must still be offered for the date, and the booking waits
    for a manager assignment.
    """
    service_date = parse_calendar_date(fields.get("date"))
    time_slot = normalize_time_slot((fields.get("time_slot") or "").strip())
    if slot_start_time(time_slot) is None:
        raise InvalidRequestError(f"Invalid time slot '{fields.get('time_slot')}'")

    date = format_calendar_date(service_date)
    technician_id = fields.get("mechanic_id") or None
    if technician_id:
        get_technician_or_404(db, technician_id)
        ensure_bookable(db, date, time_slot, technician_id)
    else:
        ensure_slot_open(db, date, time_slot)

    price = fields.get("price")
    listed = settings.SERVICE_PRICES.get(fields.get("service_type"))
    if listed is not None and price != listed:
        logger.warning(f"[BOOKING] Price {price} for {fields.get('service_type')} replaced with list price {listed}")
        price = listed

    customer = upsert_customer(
        db,
        name=fields.get("customer_name"),
        email=fields.get("customer_email"),
        phone=fields.get("customer_phone"),
        preferred_contact_method=fields.get("preferred_contact_method"),
        address=fields.get("address"),
    )
    previous = db.query(Appointment).filter(Appointment.customer_id == customer.id).count()

    appointment = Appointment(**{k: fields.get(k) for k in _BOOKING_FIELDS})
    appointment.customer_email = customer.email
    appointment.price = price
    appointment.date = date
    appointment.time_slot = time_slot
    appointment.mechanic_id = technician_id
    appointment.status = STATUS_SCHEDULED
    appointment.customer_id = customer.id
    appointment.vehicle_number = previous + 1
    appointment.follow_up_date = format_calendar_date(
        service_date + relativedelta(months=settings.FOLLOW_UP_MONTHS)
    )
    appointment.job_number = counter.next_value(db)
    appointment.created_at = datetime.utcnow()
    db.add(appointment)

    _commit_slot_write(db, appointment)
    logger.info(
        f"[BOOKING] Job #{appointment.job_number} {date} {time_slot} for {customer.email} "
        f"(technician={technician_id or 'unassigned'})"
    )
    return appointment


# ── Assignment ─────────────────────────────────────────────────────────────

def assign_technician(db: Session, appointment_id: str,
                      technician_id: str) -> tuple[Appointment, Technician, bool]:
    """
    Manager assignment. Returns (appointment, technician, eligible); eligible
    is False when the technician had not marked the slot available.
    """
    appointment = get_appointment_or_404(db, appointment_id)
    if appointment.status in (STATUS_COMPLETED, STATUS_CANCELLED):
        raise StateConflictError(f"Cannot assign a technician to a {appointment.status} appointment")
    technician = get_technician_or_404(db, technician_id)

    eligible = check_manager_assignment(db, appointment, technician_id)
    appointment.mechanic_id = technician_id
    _commit_slot_write(db, appointment)
    logger.info(f"[BOOKING] Job #{appointment.job_number} assigned to {technician.name}")
    return appointment, technician, eligible


# ── Transitions ────────────────────────────────────────────────────────────

def _ensure_own_job(appointment: Appointment, caller: Caller, message: str):
    if caller.is_technician and appointment.mechanic_id != caller.id:
        raise AuthorizationError(message, status_code=403)


def start_job(db: Session, appointment_id: str, caller: Caller) -> Appointment:
    appointment = get_appointment_or_404(db, appointment_id)
    _ensure_own_job(appointment, caller, "Not authorized to start this job")
    _check_transition(appointment, STATUS_IN_PROGRESS)
    appointment.status = STATUS_IN_PROGRESS
    db.commit()
    db.refresh(appointment)
    logger.info(f"[BOOKING] Job #{appointment.job_number} started by {caller.role} {caller.id}")
    return appointment


def complete_job(db: Session, appointment_id: str, caller: Caller) -> Appointment:
    appointment = get_appointment_or_404(db, appointment_id)
    _ensure_own_job(appointment, caller, "Not authorized to complete this job")
    _check_transition(appointment, STATUS_COMPLETED)
    appointment.status = STATUS_COMPLETED

    if appointment.mechanic_id:
        technician = db.get(Technician, appointment.mechanic_id)
        if technician is not None:
            technician.oil_change_count = (technician.oil_change_count or 0) + 1
    db.commit()
    db.refresh(appointment)
    logger.info(f"[BOOKING] Job #{appointment.job_number} completed by {caller.role} {caller.id}")
    return appointment


def update_status(db: Session, appointment_id: str, status: str, caller: Caller) -> Appointment:
    """Manager status change. Cancellation goes through cancel_appointment."""
    if status == STATUS_IN_PROGRESS:
        return start_job(db, appointment_id, caller)
    if status == STATUS_COMPLETED:
        return complete_job(db, appointment_id, caller)
    if status == STATUS_SCHEDULED:
        appointment = get_appointment_or_404(db, appointment_id)
        _check_transition(appointment, STATUS_SCHEDULED)
    raise InvalidRequestError(f"Unsupported status '{status}'")


def cancellation_deadline(appointment: Appointment) -> Optional[datetime]:
    start = slot_start_time(appointment.time_slot)
    if start is None:
        return None
    starts_at = datetime.combine(parse_calendar_date(appointment.date), start)
    return starts_at - timedelta(hours=settings.CANCELLATION_CUTOFF_HOURS)


def cancel_appointment(db: Session, appointment_id: str,
                       now: Optional[datetime] = None) -> Appointment:
    """
    Customer cancellation through the emailed link. The slot is released
    because cancelled appointments drop out of the active-slot index.
    """
    appointment = get_appointment_or_404(db, appointment_id)
    if appointment.status == STATUS_CANCELLED:
        raise StateConflictError("Appointment is already cancelled")
    if appointment.status == STATUS_COMPLETED:
        raise StateConflictError("Cannot cancel a completed appointment")

    deadline = cancellation_deadline(appointment)
    now = now or datetime.now()
    if deadline is not None and now > deadline:
        raise StateConflictError(
            f"Appointments can only be cancelled at least "
            f"{settings.CANCELLATION_CUTOFF_HOURS} hours in advance"
        )

    appointment.status = STATUS_CANCELLED
    db.commit()
    db.refresh(appointment)
    logger.info(f"[BOOKING] Job #{appointment.job_number} cancelled ({appointment.date} {appointment.time_slot})")
    return appointment


# ── Manager bookkeeping ────────────────────────────────────────────────────

def update_payment(db: Session, appointment_id: str, fields: dict) -> Appointment:
    appointment = get_appointment_or_404(db, appointment_id)
    for field in _PAYMENT_FIELDS:
        if fields.get(field) is not None:
            setattr(appointment, field, fields[field])
    if fields.get("is_paid") and not fields.get("payment_status"):
        appointment.payment_status = "paid"
    db.commit()
    db.refresh(appointment)
    return appointment


def update_notes(db: Session, appointment_id: str, notes: Optional[str]) -> Appointment:
    appointment = get_appointment_or_404(db, appointment_id)
    appointment.notes = notes or None
    db.commit()
    db.refresh(appointment)
    return appointment


def update_follow_up(db: Session, appointment_id: str, follow_up_date: Optional[str]) -> Appointment:
    appointment = get_appointment_or_404(db, appointment_id)
    if follow_up_date:
        follow_up_date = format_calendar_date(parse_calendar_date(follow_up_date))
    appointment.follow_up_date = follow_up_date or None
    db.commit()
    db.refresh(appointment)
    return appointment


def appointments_on(db: Session, date: str) -> list[Appointment]:
    """Scheduled appointments for one day, used by the reminder job."""
    return _by_visit_time(
        db.query(Appointment)
        .filter(Appointment.date == date, Appointment.status == STATUS_SCHEDULED)
        .all()
    )
