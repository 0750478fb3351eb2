# mobile_service/schemas/time_entry.py
from datetime import datetime
from typing import Optional
from mobile_service.schemas.base import CamelModel


class TimeEntryOut(CamelModel):
    id: str
    mechanic_id: str
    check_in_time: datetime
    check_out_time: Optional[datetime]


class WeeklyHoursOut(CamelModel):
    hours: float
