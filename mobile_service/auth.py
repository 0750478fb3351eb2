# mobile_service/auth.py
"""
Staff authentication: bcrypt password hashes and signed bearer tokens.

Managers and technicians log in separately and get a JWT carrying their id and
role. Routers depend on get_current_manager / get_current_technician /
get_current_staff and receive a Caller; public routes take no caller at all.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from mobile_service.config import settings
from mobile_service.database import get_db
from mobile_service.exceptions import AuthorizationError

ROLE_MANAGER = "manager"
ROLE_TECHNICIAN = "technician"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    id: str
    role: str
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

    @property
    def is_technician(self) -> bool:
        return self.role == ROLE_TECHNICIAN


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(caller: Caller, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or settings.TOKEN_EXPIRE_MINUTES)
    claims = {"sub": caller.id, "role": caller.role, "name": caller.name,
              "email": caller.email, "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.TOKEN_ALGORITHM)


def decode_access_token(token: str) -> Caller:
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.TOKEN_ALGORITHM])
    except JWTError:
        raise AuthorizationError("Invalid or expired token")
    if not claims.get("sub") or claims.get("role") not in (ROLE_MANAGER, ROLE_TECHNICIAN):
        raise AuthorizationError("Invalid token")
    return Caller(id=claims["sub"], role=claims["role"], name=claims.get("name"), email=claims.get("email"))


def authenticate_manager(db: Session, email: str, password: str) -> Caller:
    from mobile_service.models.manager import Manager
    manager = db.query(Manager).filter(Manager.email == (email or "").strip().lower()).first()
    if not manager or not verify_password(password, manager.password_hash):
        raise AuthorizationError("Invalid credentials")
    return Caller(id=manager.id, role=ROLE_MANAGER, name=manager.name, email=manager.email)


def authenticate_technician(db: Session, email: str, password: str) -> Caller:
    from mobile_service.services.technician_service import get_technician_by_email
    technician = get_technician_by_email(db, (email or "").strip().lower())
    # Technicians without a stored password cannot log in
    if not technician or not verify_password(password, technician.password_hash):
        raise AuthorizationError("Invalid credentials")
    return Caller(id=technician.id, role=ROLE_TECHNICIAN, name=technician.name, email=technician.email)


def get_current_staff(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Caller:
    """Any logged-in manager or technician whose account still exists."""
    if credentials is None:
        raise AuthorizationError("Unauthorized")
    caller = decode_access_token(credentials.credentials)

    if caller.is_technician:
        from mobile_service.services.technician_service import get_technician
        if get_technician(db, caller.id) is None:
            raise AuthorizationError("Account no longer exists")
    else:
        from mobile_service.models.manager import Manager
        if db.query(Manager).filter(Manager.id == caller.id).first() is None:
            raise AuthorizationError("Account no longer exists")
    return caller


def get_current_manager(caller: Caller = Depends(get_current_staff)) -> Caller:
    if not caller.is_manager:
        raise AuthorizationError("Manager access required", status_code=403)
    return caller


def get_current_technician(caller: Caller = Depends(get_current_staff)) -> Caller:
    if not caller.is_technician:
        raise AuthorizationError("Technician access required", status_code=403)
    return caller
