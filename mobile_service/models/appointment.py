# mobile_service/models/appointment.py
"""
Appointments (bookings) table.
Customer and vehicle fields are a snapshot taken at booking time; customer_id is
a back-reference only. job_number is issued once from the shared job counter
and never reassigned.

Status flow: scheduled → in-progress → completed, cancelled from either
scheduled or in-progress (see services/appointment_service.py).
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean, ForeignKey, Index, text,
)
from mobile_service.database import Base, generate_id

STATUS_SCHEDULED = "scheduled"
STATUS_IN_PROGRESS = "in-progress"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

ACTIVE_STATUSES = (STATUS_SCHEDULED, STATUS_IN_PROGRESS)

_ACTIVE_SLOT_PREDICATE = "mechanic_id IS NOT NULL AND status IN ('scheduled', 'in-progress')"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # One active job per technician per date/slot
        Index(
            "uq_appointment_active_mechanic_slot", "mechanic_id", "date", "time_slot",
            unique=True,
            sqlite_where=text(_ACTIVE_SLOT_PREDICATE),
            postgresql_where=text(_ACTIVE_SLOT_PREDICATE),
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    job_number = Column(Integer, unique=True, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True)

    # Customer snapshot
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    preferred_contact_method = Column(String(50))

    # Vehicle snapshot
    vehicle_year = Column(String(10), nullable=False)
    vehicle_make = Column(String(100), nullable=False)
    vehicle_model = Column(String(100), nullable=False)
    license_plate = Column(String(20))
    license_plate_state = Column(String(20))
    vehicle_number = Column(Integer)            # nth booking for this customer

    # Service
    service_type = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)     # whole dollars
    date = Column(String(10), nullable=False, index=True)   # YYYY-MM-DD
    time_slot = Column(String(20), nullable=False)          # normalized, e.g. "08:00 AM"
    address = Column(Text, nullable=False)
    status = Column(String(20), default=STATUS_SCHEDULED, nullable=False, index=True)
    mechanic_id = Column(String(36), ForeignKey("mechanics.id", ondelete="SET NULL"), index=True)

    # Payment tracking
    date_billed = Column(String(10))
    date_received = Column(String(10))
    is_paid = Column(Boolean, default=False, nullable=False)
    collector = Column(String(100))
    payment_method = Column(String(50))
    payment_status = Column(String(20), default="pending")
    stripe_payment_intent_id = Column(String(100))
    stripe_charge_id = Column(String(100))

    follow_up_date = Column(String(10))
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Appointment {self.id} job={self.job_number} status={self.status}>"
