# mobile_service/schemas/appointment.py
from pydantic import Field, field_validator
from datetime import datetime
from typing import Literal, Optional
from mobile_service.schemas.base import CamelModel


class AppointmentCreate(CamelModel):
    customer_name: str = Field(min_length=1)
    customer_email: str = Field(min_length=3)
    customer_phone: str = Field(min_length=1)
    preferred_contact_method: Optional[str] = None
    vehicle_year: str = Field(min_length=1)
    vehicle_make: str = Field(min_length=1)
    vehicle_model: str = Field(min_length=1)
    license_plate: Optional[str] = None
    license_plate_state: Optional[str] = None
    service_type: str = Field(min_length=1)
    price: int = Field(ge=0)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    time_slot: str = Field(min_length=1)
    address: str = Field(min_length=1)
    mechanic_id: Optional[str] = None

    @field_validator("customer_email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v.strip()


class AppointmentOut(CamelModel):
    id: str
    job_number: Optional[int]
    customer_id: Optional[str]
    customer_name: str
    customer_email: str
    customer_phone: str
    preferred_contact_method: Optional[str]
    vehicle_year: str
    vehicle_make: str
    vehicle_model: str
    license_plate: Optional[str]
    license_plate_state: Optional[str]
    vehicle_number: Optional[int]
    service_type: str
    price: int
    date: str
    time_slot: str
    address: str
    status: str
    mechanic_id: Optional[str]
    date_billed: Optional[str]
    date_received: Optional[str]
    is_paid: bool
    collector: Optional[str]
    payment_method: Optional[str]
    payment_status: Optional[str]
    follow_up_date: Optional[str]
    notes: Optional[str]
    created_at: datetime


class StatusUpdate(CamelModel):
    status: Literal["scheduled", "in-progress", "completed"]


class AssignTechnician(CamelModel):
    mechanic_id: str = Field(min_length=1)


class PaymentUpdate(CamelModel):
    date_billed: Optional[str] = None
    date_received: Optional[str] = None
    is_paid: Optional[bool] = None
    collector: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None


class NotesUpdate(CamelModel):
    notes: Optional[str] = ""


class FollowUpUpdate(CamelModel):
    follow_up_date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")


class CancelResult(CamelModel):
    success: bool
    appointment: AppointmentOut
