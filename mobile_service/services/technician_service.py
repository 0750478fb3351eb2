# mobile_service/services/technician_service.py
"""
Technician directory: lookup and manager-side CRUD.
Used by the scheduling services, the auth layer, and the technicians router.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_service.exceptions import InvalidRequestError, NotFoundError
from mobile_service.models.appointment import Appointment
from mobile_service.models.technician import Technician
from mobile_service.utils.logger import get_logger

logger = get_logger(__name__)

_EDITABLE_FIELDS = {
    "email", "name", "phone", "photo_url", "bio", "oil_change_count",
    "background_check_verified", "is_public",
}


def get_technician(db: Session, technician_id: str) -> Optional[Technician]:
    return db.query(Technician).filter(Technician.id == technician_id).first()


def get_technician_or_404(db: Session, technician_id: str) -> Technician:
    technician = get_technician(db, technician_id)
    if not technician:
        raise NotFoundError(f"Technician '{technician_id}' not found")
    return technician


def get_technician_by_email(db: Session, email: str) -> Optional[Technician]:
    return db.query(Technician).filter(Technician.email == email).first()


def list_technicians(db: Session, public_only: bool = False) -> list[Technician]:
    q = db.query(Technician)
    if public_only:
        q = q.filter(Technician.is_public.is_(True))
    return q.order_by(Technician.name).all()


def create_technician(db: Session, fields: dict, password_hash: Optional[str] = None) -> Technician:
    if not fields.get("name"):
        raise InvalidRequestError("name is required")
    technician = Technician(**{k: v for k, v in fields.items() if k in _EDITABLE_FIELDS})
    technician.password_hash = password_hash
    db.add(technician)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidRequestError("A technician with this email already exists")
    db.refresh(technician)
    logger.info(f"[STAFF] Technician created: {technician.name} ({technician.id})")
    return technician


def update_technician(db: Session, technician_id: str, fields: dict,
                      password_hash: Optional[str] = None) -> Technician:
    technician = get_technician_or_404(db, technician_id)
    for key, value in fields.items():
        if key in _EDITABLE_FIELDS:
            setattr(technician, key, value)
    if password_hash:
        technician.password_hash = password_hash
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidRequestError("A technician with this email already exists")
    db.refresh(technician)
    return technician


def delete_technician(db: Session, technician_id: str) -> None:
    """Delete a technician. Their open jobs fall back to unassigned."""
    technician = get_technician_or_404(db, technician_id)
    db.query(Appointment).filter(Appointment.mechanic_id == technician_id).update(
        {Appointment.mechanic_id: None}, synchronize_session=False
    )
    # SQLite does not enforce ON DELETE CASCADE unless foreign keys are switched on
    from mobile_service.models.date_override import DateOverrideEntry
    from mobile_service.models.recurring_schedule import RecurringScheduleEntry
    from mobile_service.models.time_entry import TimeEntry
    for model in (DateOverrideEntry, RecurringScheduleEntry, TimeEntry):
        db.query(model).filter(model.mechanic_id == technician_id).delete(synchronize_session=False)
    db.delete(technician)
    db.commit()
    logger.info(f"[STAFF] Technician deleted: {technician_id}")
