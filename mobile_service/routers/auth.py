# mobile_service/routers/auth.py
"""Manager and technician login. Sessions are stateless bearer tokens."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from mobile_service.auth import (
    Caller, authenticate_manager, authenticate_technician, create_access_token,
    get_current_manager, get_current_technician,
)
from mobile_service.database import get_db
from mobile_service.schemas.auth import LoginRequest, SessionOut
from mobile_service.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _session(caller: Caller, token: str = None) -> dict:
    return {"id": caller.id, "email": caller.email, "name": caller.name,
            "role": caller.role, "token": token}


@router.post("/manager/login", response_model=SessionOut, summary="Manager login")
def manager_login(body: LoginRequest, db: Session = Depends(get_db)):
    caller = authenticate_manager(db, body.email, body.password)
    logger.info(f"[AUTH] Manager {caller.email} logged in")
    return _session(caller, create_access_token(caller))


@router.get("/manager/session", response_model=SessionOut, summary="Current manager")
def manager_session(caller: Caller = Depends(get_current_manager)):
    return _session(caller)


@router.post("/mechanic/login", response_model=SessionOut, summary="Technician login")
def technician_login(body: LoginRequest, db: Session = Depends(get_db)):
    caller = authenticate_technician(db, body.email, body.password)
    logger.info(f"[AUTH] Technician {caller.email} logged in")
    return _session(caller, create_access_token(caller))


@router.get("/mechanic/session", response_model=SessionOut, summary="Current technician")
def technician_session(caller: Caller = Depends(get_current_technician)):
    return _session(caller)
