# mobile_service/schemas/customer.py
from datetime import datetime
from typing import Optional
from mobile_service.schemas.base import CamelModel
from mobile_service.schemas.appointment import AppointmentOut


class CustomerOut(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    preferred_contact_method: Optional[str]
    address: Optional[str]
    notes: Optional[str]
    created_at: datetime


class CustomerDetail(CustomerOut):
    appointments: list[AppointmentOut] = []


class CustomerUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
