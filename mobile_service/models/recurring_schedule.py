# mobile_service/models/recurring_schedule.py
"""
Weekly availability template (background layer).
One row per technician × weekday × slot. Replaced wholesale per technician by
schedule_service.replace_recurring_schedule, never patched row by row.
day_of_week: 0=Sunday … 6=Saturday.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint, CheckConstraint
from mobile_service.database import Base, generate_id


class RecurringScheduleEntry(Base):
    __tablename__ = "mechanic_recurring_schedule"
    __table_args__ = (
        UniqueConstraint("mechanic_id", "day_of_week", "time_slot", name="uq_recurring_mechanic_day_slot"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_recurring_day_of_week"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    mechanic_id = Column(String(36), ForeignKey("mechanics.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False, index=True)
    time_slot = Column(String(20), nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<RecurringScheduleEntry mech={self.mechanic_id} dow={self.day_of_week} slot={self.time_slot}>"
