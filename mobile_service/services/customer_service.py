# mobile_service/services/customer_service.py
"""
Customer registry. One row per email address, refreshed from each booking.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from mobile_service.exceptions import InvalidRequestError, NotFoundError
from mobile_service.models.appointment import Appointment
from mobile_service.models.customer import Customer
from mobile_service.utils.logger import get_logger

logger = get_logger(__name__)

_EDITABLE_FIELDS = ("name", "email", "phone", "preferred_contact_method", "address", "notes")


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def upsert_customer(db: Session, name: str, email: str, phone: str,
                    preferred_contact_method: Optional[str] = None,
                    address: Optional[str] = None) -> Customer:
    """
    Find the customer by email or create one. Present values from the new
    booking overwrite stored ones; missing values never blank out stored ones.
    Flushes but does not commit; the booking transaction owns the commit.
    """
    key = _normalize_email(email)
    if not key:
        raise InvalidRequestError("customer email is required")

    customer = db.query(Customer).filter(Customer.email == key).first()
    if customer is None:
        customer = Customer(email=key, name=name, phone=phone,
                            preferred_contact_method=preferred_contact_method,
                            address=address, created_at=datetime.utcnow())
        db.add(customer)
        db.flush()
        logger.info(f"[CUSTOMER] New customer {key}")
        return customer

    fresh = {"name": name, "phone": phone,
             "preferred_contact_method": preferred_contact_method, "address": address}
    for field, value in fresh.items():
        if value:
            setattr(customer, field, value)
    db.flush()
    return customer


def list_customers(db: Session) -> list[Customer]:
    return db.query(Customer).order_by(Customer.created_at.desc()).all()


def get_customer_or_404(db: Session, customer_id: str) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def customer_appointments(db: Session, customer_id: str) -> list[Appointment]:
    return (
        db.query(Appointment)
        .filter(Appointment.customer_id == customer_id)
        .order_by(Appointment.date.desc())
        .all()
    )


def update_customer(db: Session, customer_id: str, fields: dict) -> Customer:
    customer = get_customer_or_404(db, customer_id)
    for field in _EDITABLE_FIELDS:
        if fields.get(field) is not None:
            value = fields[field]
            setattr(customer, field, _normalize_email(value) if field == "email" else value)
    db.commit()
    db.refresh(customer)
    return customer
