# mobile_service/routers/technicians.py
"""Technician directory: public landing-page list and manager CRUD."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from mobile_service.auth import Caller, get_current_manager, hash_password
from mobile_service.database import get_db
from mobile_service.schemas.availability import RecurringScheduleIn, RecurringSlotOut
from mobile_service.schemas.technician import (
    EmployeeClockStatus, TechnicianCreate, TechnicianOut, TechnicianPublic, TechnicianUpdate,
)
from mobile_service.services import schedule_service, technician_service, time_entry_service

router = APIRouter()


@router.get("/mechanics/public", response_model=list[TechnicianPublic], summary="Public technician profiles")
def public_technicians(db: Session = Depends(get_db)):
    return technician_service.list_technicians(db, public_only=True)


@router.get("/mechanics", response_model=list[TechnicianOut], summary="All technicians")
def list_technicians(db: Session = Depends(get_db), _: Caller = Depends(get_current_manager)):
    return technician_service.list_technicians(db)


@router.post("/mechanics", response_model=TechnicianOut, status_code=201, summary="Add a technician")
def create_technician(body: TechnicianCreate, db: Session = Depends(get_db),
                      _: Caller = Depends(get_current_manager)):
    fields = body.model_dump(exclude={"password"})
    if fields.get("email"):
        fields["email"] = fields["email"].strip().lower()
    password_hash = hash_password(body.password) if body.password else None
    return technician_service.create_technician(db, fields, password_hash)


@router.patch("/mechanics/{technician_id}", response_model=TechnicianOut, summary="Edit a technician")
def update_technician(technician_id: str, body: TechnicianUpdate, db: Session = Depends(get_db),
                      _: Caller = Depends(get_current_manager)):
    fields = body.model_dump(exclude_unset=True, exclude={"password"})
    if fields.get("email"):
        fields["email"] = fields["email"].strip().lower()
    password_hash = hash_password(body.password) if body.password else None
    return technician_service.update_technician(db, technician_id, fields, password_hash)


@router.delete("/mechanics/{technician_id}", summary="Remove a technician")
def delete_technician(technician_id: str, db: Session = Depends(get_db),
                      _: Caller = Depends(get_current_manager)):
    technician_service.delete_technician(db, technician_id)
    return {"success": True}


@router.get("/manager/technicians/{technician_id}/recurring-schedule",
            response_model=list[RecurringSlotOut], summary="A technician's weekly template")
def get_schedule(technician_id: str, db: Session = Depends(get_db),
                 _: Caller = Depends(get_current_manager)):
    technician_service.get_technician_or_404(db, technician_id)
    return schedule_service.get_recurring_schedule(db, technician_id)


@router.post("/manager/technicians/{technician_id}/recurring-schedule",
             response_model=list[RecurringSlotOut], summary="Replace a technician's weekly template")
def replace_schedule(technician_id: str, body: RecurringScheduleIn, db: Session = Depends(get_db),
                     _: Caller = Depends(get_current_manager)):
    slots = [schedule_service.RecurringSlot(s.day_of_week, s.time_slot, s.is_available) for s in body.schedules]
    return schedule_service.replace_recurring_schedule(db, technician_id, slots)


@router.get("/manager/employee-time-tracking", response_model=list[EmployeeClockStatus],
            summary="Clock status and weekly hours for every technician")
def employee_time_tracking(db: Session = Depends(get_db), _: Caller = Depends(get_current_manager)):
    rows = []
    for row in time_entry_service.clock_overview(db):
        profile = TechnicianOut.model_validate(row["technician"]).model_dump()
        rows.append({**profile,
                     "is_clocked_in": row["is_clocked_in"],
                     "current_check_in_time": row["current_check_in_time"],
                     "weekly_hours": row["weekly_hours"]})
    return rows
