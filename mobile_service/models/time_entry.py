# mobile_service/models/time_entry.py
"""
Technician clock-in / clock-out log.
At most one open entry (check_out_time IS NULL) per technician, backed by a
partial unique index.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, text
from mobile_service.database import Base, generate_id


class TimeEntry(Base):
    __tablename__ = "mechanic_time_entries"
    __table_args__ = (
        Index(
            "uq_time_entry_one_open_per_mechanic", "mechanic_id",
            unique=True,
            sqlite_where=text("check_out_time IS NULL"),
            postgresql_where=text("check_out_time IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    mechanic_id = Column(String(36), ForeignKey("mechanics.id", ondelete="CASCADE"), nullable=False)
    check_in_time = Column(DateTime, nullable=False, index=True)
    check_out_time = Column(DateTime)

    def __repr__(self):
        return f"<TimeEntry {self.id} mech={self.mechanic_id} open={self.check_out_time is None}>"
