# mobile_service/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy (PostgreSQL in production, SQLite for local runs). All models
are auto-imported here so create_tables() creates every table in one call.
"""

import uuid

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from mobile_service.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # One connection may be shared across FastAPI's worker threads
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,          # Auto-reconnect if DB connection drops
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,                  # Set True to log all SQL queries (debug only)
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    # Staff
    from mobile_service.models.technician import Technician          # noqa
    from mobile_service.models.manager import Manager                # noqa
    # Scheduling layers
    from mobile_service.models.recurring_schedule import RecurringScheduleEntry  # noqa
    from mobile_service.models.date_override import DateOverrideEntry            # noqa
    # Bookings
    from mobile_service.models.customer import Customer              # noqa
    from mobile_service.models.appointment import Appointment        # noqa
    from mobile_service.models.job_counter import JobCounter         # noqa
    # Time tracking
    from mobile_service.models.time_entry import TimeEntry           # noqa

    Base.metadata.create_all(bind=bind or engine)


def generate_id() -> str:
    """Opaque string primary key. Appointment ids double as cancellation capabilities."""
    return str(uuid.uuid4())
