# mobile_service/services/job_counter.py
"""
Job number allocation.

The appointment lifecycle depends on the JobCounter interface, not on a
concrete store, so tests can hand it a deterministic counter:
  - DatabaseJobCounter: atomic UPDATE … SET value = value + 1 RETURNING value
  - InMemoryJobCounter: lock-guarded integer, for tests and scripts
Numbers are strictly increasing and never handed out twice, even when the
appointment that received one is later cancelled or deleted.
"""

import threading
from abc import ABC, abstractmethod

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_service.models.job_counter import JobCounter as JobCounterRow
from mobile_service.utils.logger import get_logger

logger = get_logger(__name__)

JOB_NUMBER_COUNTER = "job_number"


class JobCounter(ABC):
    @abstractmethod
    def next_value(self, db: Session) -> int:
        """Reserve and return the next job number."""


class DatabaseJobCounter(JobCounter):
    """
    Counter row in the job_counters table. The increment and the read happen
    in one UPDATE … RETURNING statement, so two concurrent bookings can never
    observe the same value. The row lock is held until the caller commits.
    """

    def __init__(self, name: str = JOB_NUMBER_COUNTER, start: int = 1):
        self.name = name
        self.start = start

    def ensure_row(self, db: Session):
        """Create the counter row if missing. Called once at startup."""
        if db.get(JobCounterRow, self.name) is not None:
            return
        db.add(JobCounterRow(name=self.name, value=self.start - 1))
        try:
            db.commit()
            logger.info(f"[JOBS] Counter '{self.name}' initialised at {self.start - 1}")
        except IntegrityError:
            db.rollback()

    def next_value(self, db: Session) -> int:
        stmt = (
            update(JobCounterRow)
            .where(JobCounterRow.name == self.name)
            .values(value=JobCounterRow.value + 1)
            .returning(JobCounterRow.value)
        )
        value = db.execute(stmt).scalar_one_or_none()
        if value is None:
            # First booking on a database that skipped startup initialisation
            db.add(JobCounterRow(name=self.name, value=self.start))
            db.flush()
            value = self.start
        logger.debug(f"[JOBS] Issued job number {value}")
        return value


class InMemoryJobCounter(JobCounter):
    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def next_value(self, db: Session = None) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value


_default_counter = DatabaseJobCounter()


def get_job_counter() -> JobCounter:
    """FastAPI dependency. Overridden in tests."""
    return _default_counter
