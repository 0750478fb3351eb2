# mobile_service/routers/availability.py
"""Public availability lookup for the booking form."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from mobile_service.database import get_db
from mobile_service.schemas.availability import SlotAvailabilityOut, TechnicianRef
from mobile_service.services.availability_service import available_slots, technicians_for_slot
from mobile_service.utils.time_slots import parse_calendar_date

router = APIRouter()


@router.get("/availability/{date}", response_model=list[SlotAvailabilityOut],
            summary="Bookable slots on a date")
def get_availability(date: str, db: Session = Depends(get_db)):
    """Only slots with at least one available technician are listed."""
    return [
        {"time_slot": entry["time_slot"], "mechanics": entry["technicians"]}
        for entry in available_slots(db, date)
    ]


@router.get("/availability/{date}/{time_slot}/mechanics", response_model=list[TechnicianRef],
            summary="Technicians available in one slot")
def get_slot_technicians(date: str, time_slot: str, db: Session = Depends(get_db)):
    parse_calendar_date(date)
    return technicians_for_slot(db, date, time_slot)
