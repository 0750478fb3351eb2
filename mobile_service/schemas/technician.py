# mobile_service/schemas/technician.py
from pydantic import Field
from typing import Optional
from mobile_service.schemas.base import CamelModel


class TechnicianCreate(CamelModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    oil_change_count: int = 0
    background_check_verified: bool = False
    is_public: bool = True


class TechnicianUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    oil_change_count: Optional[int] = Field(default=None, ge=0)
    background_check_verified: Optional[bool] = None
    is_public: Optional[bool] = None


class TechnicianPublic(CamelModel):
    """Landing-page view: no email, no credentials."""
    id: str
    name: str
    phone: Optional[str]
    photo_url: Optional[str]
    bio: Optional[str]
    oil_change_count: int
    background_check_verified: bool
    is_public: bool


class TechnicianOut(TechnicianPublic):
    email: Optional[str]


class EmployeeClockStatus(TechnicianOut):
    is_clocked_in: bool
    current_check_in_time: Optional[str] = None
    weekly_hours: float = 0
