# mobile_service/schemas/availability.py
from pydantic import Field
from typing import Any
from mobile_service.schemas.base import CamelModel


class TechnicianRef(CamelModel):
    id: str
    name: str


class SlotAvailabilityOut(CamelModel):
    time_slot: str
    mechanics: list[TechnicianRef]


class DateOverrideIn(CamelModel):
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    time_slot: str = Field(min_length=1)
    is_available: bool = True


class DateOverrideBatchIn(CamelModel):
    availabilities: list[DateOverrideIn]


class DateOverrideOut(CamelModel):
    id: str
    mechanic_id: str
    date: str
    time_slot: str
    is_available: bool


class RecurringSlotIn(CamelModel):
    day_of_week: Any = None
    time_slot: Any = None
    is_available: Any = None


class RecurringScheduleIn(CamelModel):
    schedules: list[RecurringSlotIn]


class RecurringSlotOut(CamelModel):
    id: str
    mechanic_id: str
    day_of_week: int
    time_slot: str
    is_available: bool
