# mobile_service/routers/appointments.py
"""
Bookings: public create / fetch / cancel, manager list and bookkeeping.
Emails go out as background tasks after the response is sent.
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from typing import Optional
from mobile_service.auth import Caller, get_current_manager
from mobile_service.database import get_db
from mobile_service.models.technician import Technician
from mobile_service.schemas.appointment import (
    AppointmentCreate, AppointmentOut, AssignTechnician, CancelResult,
    FollowUpUpdate, NotesUpdate, PaymentUpdate, StatusUpdate,
)
from mobile_service.services import appointment_service
from mobile_service.services.email_templates import (
    APPOINTMENT_CANCELLED, BOOKING_CONFIRMED, JOB_COMPLETED, TECHNICIAN_ASSIGNED,
)
from mobile_service.services.job_counter import JobCounter, get_job_counter
from mobile_service.services.notification_service import (
    Notifier, appointment_payload, get_notifier, send_safely,
)
from mobile_service.models.appointment import STATUS_COMPLETED

router = APIRouter()


def queue_notification(tasks: BackgroundTasks, notifier: Notifier, event: str,
                       appointment, technician: Optional[Technician] = None):
    tasks.add_task(send_safely, notifier, event, appointment_payload(appointment, technician))


def _assigned_technician(db: Session, appointment) -> Optional[Technician]:
    if not appointment.mechanic_id:
        return None
    return db.get(Technician, appointment.mechanic_id)


@router.post("/appointments", response_model=AppointmentOut, status_code=201,
             summary="Book an appointment")
def create_appointment(
    body: AppointmentCreate,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    counter: JobCounter = Depends(get_job_counter),
    notifier: Notifier = Depends(get_notifier),
):
    appointment = appointment_service.create_appointment(db, body.model_dump(), counter)
    technician = _assigned_technician(db, appointment)
    queue_notification(tasks, notifier, BOOKING_CONFIRMED, appointment, technician)
    if technician is not None:
        queue_notification(tasks, notifier, TECHNICIAN_ASSIGNED, appointment, technician)
    return appointment


@router.get("/appointments", response_model=list[AppointmentOut], summary="All appointments")
def list_appointments(
    date: Optional[str] = None,
    status: Optional[str] = None,
    mechanic_id: Optional[str] = None,
    db: Session = Depends(get_db),
    _: Caller = Depends(get_current_manager),
):
    return appointment_service.list_appointments(db, date=date, status=status, technician_id=mechanic_id)


@router.get("/appointments/{appointment_id}", response_model=AppointmentOut,
            summary="One appointment (cancellation page)")
def get_appointment(appointment_id: str, db: Session = Depends(get_db)):
    return appointment_service.get_appointment_or_404(db, appointment_id)


@router.patch("/appointments/{appointment_id}/status", response_model=AppointmentOut,
              summary="Move an appointment forward")
def update_status(
    appointment_id: str,
    body: StatusUpdate,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_manager),
    notifier: Notifier = Depends(get_notifier),
):
    appointment = appointment_service.update_status(db, appointment_id, body.status, caller)
    if appointment.status == STATUS_COMPLETED:
        queue_notification(tasks, notifier, JOB_COMPLETED, appointment, _assigned_technician(db, appointment))
    return appointment


@router.patch("/appointments/{appointment_id}/assign", response_model=AppointmentOut,
              summary="Assign a technician")
def assign_technician(
    appointment_id: str,
    body: AssignTechnician,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    _: Caller = Depends(get_current_manager),
    notifier: Notifier = Depends(get_notifier),
):
    appointment, technician, _eligible = appointment_service.assign_technician(db, appointment_id, body.mechanic_id)
    queue_notification(tasks, notifier, TECHNICIAN_ASSIGNED, appointment, technician)
    return appointment


@router.post("/appointments/{appointment_id}/cancel", response_model=CancelResult,
             summary="Cancel via the emailed link")
def cancel_appointment(
    appointment_id: str,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    appointment = appointment_service.cancel_appointment(db, appointment_id)
    queue_notification(tasks, notifier, APPOINTMENT_CANCELLED, appointment)
    return {"success": True, "appointment": appointment}


@router.patch("/appointments/{appointment_id}/payment", response_model=AppointmentOut,
              summary="Update payment tracking")
def update_payment(appointment_id: str, body: PaymentUpdate, db: Session = Depends(get_db),
                   _: Caller = Depends(get_current_manager)):
    return appointment_service.update_payment(db, appointment_id, body.model_dump(exclude_unset=True))


@router.patch("/appointments/{appointment_id}/notes", response_model=AppointmentOut)
def update_notes(appointment_id: str, body: NotesUpdate, db: Session = Depends(get_db),
                 _: Caller = Depends(get_current_manager)):
    return appointment_service.update_notes(db, appointment_id, body.notes)


@router.patch("/appointments/{appointment_id}/follow-up", response_model=AppointmentOut)
def update_follow_up(appointment_id: str, body: FollowUpUpdate, db: Session = Depends(get_db),
                     _: Caller = Depends(get_current_manager)):
    return appointment_service.update_follow_up(db, appointment_id, body.follow_up_date)
