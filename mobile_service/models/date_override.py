# mobile_service/models/date_override.py
"""
Date-specific availability (override layer).
One row per technician × calendar date × slot, upserted by that key.
Read together with the recurring template by availability_service.
"""

from sqlalchemy import Column, String, Boolean, ForeignKey, UniqueConstraint
from mobile_service.database import Base, generate_id


class DateOverrideEntry(Base):
    __tablename__ = "mechanic_availability"
    __table_args__ = (
        UniqueConstraint("mechanic_id", "date", "time_slot", name="uq_override_mechanic_date_slot"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    mechanic_id = Column(String(36), ForeignKey("mechanics.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)    # YYYY-MM-DD
    time_slot = Column(String(20), nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<DateOverrideEntry mech={self.mechanic_id} date={self.date} slot={self.time_slot}>"
