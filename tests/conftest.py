# tests/conftest.py
"""Shared fixtures: in-memory SQLite, technician factories, API client."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mobile_service.auth import Caller, ROLE_MANAGER, ROLE_TECHNICIAN, create_access_token
from mobile_service.database import create_tables, get_db
from mobile_service.main import app
from mobile_service.models.appointment import Appointment
from mobile_service.models.date_override import DateOverrideEntry
from mobile_service.models.manager import Manager
from mobile_service.models.recurring_schedule import RecurringScheduleEntry
from mobile_service.models.technician import Technician
from mobile_service.services.job_counter import InMemoryJobCounter, get_job_counter
from mobile_service.services.notification_service import get_notifier


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_technician(db):
    counter = {"n": 0}

    def _make(name=None, email=None, **fields):
        counter["n"] += 1
        technician = Technician(
            name=name or f"Tech {counter['n']}",
            email=email,
            **fields,
        )
        db.add(technician)
        db.commit()
        db.refresh(technician)
        return technician

    return _make


@pytest.fixture
def add_recurring(db):
    def _add(technician, day_of_week, time_slot, is_available=True):
        db.add(RecurringScheduleEntry(mechanic_id=technician.id, day_of_week=day_of_week,
                                      time_slot=time_slot, is_available=is_available))
        db.commit()

    return _add


@pytest.fixture
def add_override(db):
    def _add(technician, date, time_slot, is_available=True):
        db.add(DateOverrideEntry(mechanic_id=technician.id, date=date,
                                 time_slot=time_slot, is_available=is_available))
        db.commit()

    return _add


@pytest.fixture
def make_appointment(db):
    """Insert an appointment row directly, bypassing the booking rules."""
    counter = {"n": 0}

    def _make(date="2026-11-03", time_slot="09:00 AM", mechanic_id=None, status="scheduled", **fields):
        counter["n"] += 1
        appointment = Appointment(
            job_number=counter["n"],
            customer_name=fields.pop("customer_name", "Pat Customer"),
            customer_email=fields.pop("customer_email", "pat@example.com"),
            customer_phone="555-0100",
            vehicle_year="2018",
            vehicle_make="Honda",
            vehicle_model="Civic",
            service_type="Standard Blend",
            price=59,
            date=date,
            time_slot=time_slot,
            address="1 Main St",
            status=status,
            mechanic_id=mechanic_id,
            created_at=datetime.utcnow(),
            **fields,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


def booking_fields(**overrides):
    fields = {
        "customer_name": "Pat Customer",
        "customer_email": "Pat@Example.com",
        "customer_phone": "555-0100",
        "preferred_contact_method": "email",
        "vehicle_year": "2018",
        "vehicle_make": "Honda",
        "vehicle_model": "Civic",
        "license_plate": "ABC123",
        "license_plate_state": "TX",
        "service_type": "Standard Blend",
        "price": 59,
        "date": "2026-11-03",
        "time_slot": "09:00 AM",
        "address": "1 Main St",
        "mechanic_id": None,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def manager_caller(db):
    manager = Manager(email="boss@example.com", name="Boss", password_hash="x")
    db.add(manager)
    db.commit()
    return Caller(id=manager.id, role=ROLE_MANAGER, name=manager.name, email=manager.email)


def technician_caller(technician) -> Caller:
    return Caller(id=technician.id, role=ROLE_TECHNICIAN, name=technician.name, email=technician.email)


def bearer(caller: Caller) -> dict:
    return {"Authorization": f"Bearer {create_access_token(caller)}"}


@pytest.fixture
def notifier():
    fake = MagicMock()
    fake.notify = AsyncMock(return_value={"success": True, "skipped": False, "sent": 1})
    return fake


@pytest.fixture
def client(session_factory, notifier):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    counter = InMemoryJobCounter(start=1000)
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_job_counter] = lambda: counter
    yield TestClient(app)
    app.dependency_overrides.clear()
