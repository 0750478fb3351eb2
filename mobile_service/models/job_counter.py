# mobile_service/models/job_counter.py
"""
Named monotonic counters. The "job_number" row issues appointment job numbers.
Advanced only through services/job_counter.DatabaseJobCounter.
"""

from sqlalchemy import Column, Integer, String
from mobile_service.database import Base


class JobCounter(Base):
    __tablename__ = "job_counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<JobCounter {self.name}={self.value}>"
