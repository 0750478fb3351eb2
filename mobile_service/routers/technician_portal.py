# mobile_service/routers/technician_portal.py
"""
Technician self-service: date overrides, weekly template, own jobs,
clock-in / clock-out. Every route acts on the logged-in technician only.
"""

from datetime import datetime
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from mobile_service.auth import Caller, get_current_technician
from mobile_service.database import get_db
from mobile_service.routers.appointments import queue_notification
from mobile_service.schemas.appointment import AppointmentOut
from mobile_service.schemas.availability import (
    DateOverrideBatchIn, DateOverrideIn, DateOverrideOut, RecurringScheduleIn, RecurringSlotOut,
)
from mobile_service.schemas.time_entry import TimeEntryOut, WeeklyHoursOut
from mobile_service.services import appointment_service, override_service, schedule_service, time_entry_service
from mobile_service.services.email_templates import JOB_COMPLETED
from mobile_service.services.notification_service import Notifier, get_notifier
from mobile_service.services.technician_service import get_technician
from mobile_service.utils.time_slots import parse_calendar_date

router = APIRouter(prefix="/mechanic")


# ── Date overrides ───────────────────────────────────────────────────────────

@router.get("/availability", response_model=list[DateOverrideOut], summary="My date overrides")
def list_my_overrides(from_date: Optional[str] = Query(default=None, alias="fromDate"),
                      db: Session = Depends(get_db),
                      caller: Caller = Depends(get_current_technician)):
    return override_service.list_overrides(db, caller.id, from_date=from_date)


@router.post("/availability", response_model=DateOverrideOut, summary="Set one date override")
def set_override(body: DateOverrideIn, db: Session = Depends(get_db),
                 caller: Caller = Depends(get_current_technician)):
    return override_service.upsert_override(
        db, caller.id, override_service.OverrideSlot(body.date, body.time_slot, body.is_available)
    )


@router.post("/availability/batch", response_model=list[DateOverrideOut], summary="Set many date overrides")
def set_overrides(body: DateOverrideBatchIn, db: Session = Depends(get_db),
                  caller: Caller = Depends(get_current_technician)):
    return override_service.upsert_overrides(
        db, caller.id,
        [override_service.OverrideSlot(a.date, a.time_slot, a.is_available) for a in body.availabilities],
    )


@router.delete("/availability", summary="Remove one date override")
def remove_override(date: str, time_slot: str = Query(alias="timeSlot"),
                    db: Session = Depends(get_db),
                    caller: Caller = Depends(get_current_technician)):
    deleted = override_service.delete_override(db, caller.id, date, time_slot)
    return {"success": True, "deleted": deleted}


# ── Weekly template ──────────────────────────────────────────────────────────

@router.get("/recurring-schedule", response_model=list[RecurringSlotOut], summary="My weekly template")
def get_my_schedule(db: Session = Depends(get_db), caller: Caller = Depends(get_current_technician)):
    return schedule_service.get_recurring_schedule(db, caller.id)


@router.post("/recurring-schedule", response_model=list[RecurringSlotOut], summary="Replace my weekly template")
def replace_my_schedule(body: RecurringScheduleIn, db: Session = Depends(get_db),
                        caller: Caller = Depends(get_current_technician)):
    slots = [schedule_service.RecurringSlot(s.day_of_week, s.time_slot, s.is_available) for s in body.schedules]
    return schedule_service.replace_recurring_schedule(db, caller.id, slots)


# ── Jobs ─────────────────────────────────────────────────────────────────────

@router.get("/jobs", response_model=list[AppointmentOut], summary="My assigned jobs")
def my_jobs(db: Session = Depends(get_db), caller: Caller = Depends(get_current_technician)):
    return appointment_service.technician_jobs(db, caller.id)


@router.patch("/jobs/{appointment_id}/start", response_model=AppointmentOut, summary="Start a job")
def start_job(appointment_id: str, db: Session = Depends(get_db),
              caller: Caller = Depends(get_current_technician)):
    return appointment_service.start_job(db, appointment_id, caller)


@router.patch("/jobs/{appointment_id}/complete", response_model=AppointmentOut, summary="Complete a job")
def complete_job(appointment_id: str, tasks: BackgroundTasks, db: Session = Depends(get_db),
                 caller: Caller = Depends(get_current_technician),
                 notifier: Notifier = Depends(get_notifier)):
    appointment = appointment_service.complete_job(db, appointment_id, caller)
    queue_notification(tasks, notifier, JOB_COMPLETED, appointment, get_technician(db, caller.id))
    return appointment


# ── Time tracking ────────────────────────────────────────────────────────────

@router.post("/time-entry/check-in", response_model=TimeEntryOut, summary="Clock in")
def check_in(db: Session = Depends(get_db), caller: Caller = Depends(get_current_technician)):
    return time_entry_service.check_in(db, caller.id)


@router.post("/time-entry/check-out", response_model=TimeEntryOut, summary="Clock out")
def check_out(db: Session = Depends(get_db), caller: Caller = Depends(get_current_technician)):
    return time_entry_service.check_out(db, caller.id)


@router.get("/time-entry/current", response_model=Optional[TimeEntryOut], summary="Open entry, if any")
def current_entry(db: Session = Depends(get_db), caller: Caller = Depends(get_current_technician)):
    return time_entry_service.current_entry(db, caller.id)


@router.get("/time-entries", response_model=list[TimeEntryOut], summary="My entries this week")
def my_entries(week_start: Optional[str] = Query(default=None, alias="weekStart"),
               db: Session = Depends(get_db), caller: Caller = Depends(get_current_technician)):
    since = None
    if week_start:
        since = datetime.combine(parse_calendar_date(week_start), datetime.min.time())
    return time_entry_service.list_entries(db, caller.id, since=since)


@router.get("/weekly-hours", response_model=WeeklyHoursOut, summary="Hours worked this week")
def my_weekly_hours(db: Session = Depends(get_db), caller: Caller = Depends(get_current_technician)):
    return {"hours": time_entry_service.weekly_hours(db, caller.id)}
