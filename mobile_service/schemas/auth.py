# mobile_service/schemas/auth.py
from typing import Optional
from mobile_service.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: str
    password: str


class SessionOut(CamelModel):
    id: str
    email: Optional[str]
    name: Optional[str]
    role: str
    token: Optional[str] = None
