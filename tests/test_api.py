# tests/test_api.py
"""HTTP surface: routing, auth, camelCase wire format, error statuses."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from unittest.mock import patch
from mobile_service.auth import hash_password
from mobile_service.models.manager import Manager
from mobile_service.services.email_templates import (
    APPOINTMENT_CANCELLED, BOOKING_CONFIRMED, JOB_COMPLETED, TECHNICIAN_ASSIGNED,
)
from conftest import bearer, technician_caller

TUESDAY = "2026-11-03"


def booking_body(**overrides):
    body = {
        "customerName": "Pat Customer",
        "customerEmail": "pat@example.com",
        "customerPhone": "555-0100",
        "preferredContactMethod": "email",
        "vehicleYear": "2018",
        "vehicleMake": "Honda",
        "vehicleModel": "Civic",
        "serviceType": "Standard Blend",
        "price": 59,
        "date": TUESDAY,
        "timeSlot": "09:00 AM",
        "address": "1 Main St",
    }
    body.update(overrides)
    return body


def sent_events(notifier):
    return [c.args[0] for c in notifier.notify.await_args_list]


@pytest.fixture
def open_slot(make_technician, add_recurring):
    """A technician offering 09:00 AM every day of the week."""
    tech = make_technician("Robin")
    for day in range(7):
        add_recurring(tech, day, "09:00 AM")
    return tech


class TestAvailabilityApi:
    def test_slots_with_technicians(self, client, make_technician, add_recurring, add_override):
        a = make_technician("Alex")
        b = make_technician("Blake")
        add_recurring(a, 2, "08:00 AM")
        add_override(b, TUESDAY, "8:00 AM")

        resp = client.get(f"/api/availability/{TUESDAY}")

        assert resp.status_code == 200
        body = resp.json()
        assert [s["timeSlot"] for s in body] == ["08:00 AM"]
        assert sorted(m["name"] for m in body[0]["mechanics"]) == ["Alex", "Blake"]

    def test_slot_mechanics(self, client, make_technician, add_recurring):
        tech = make_technician("Alex")
        add_recurring(tech, 2, "08:00 AM")

        resp = client.get(f"/api/availability/{TUESDAY}/8:00 AM/mechanics")

        assert resp.json() == [{"id": tech.id, "name": "Alex"}]

    def test_bad_date(self, client):
        assert client.get("/api/availability/tuesday").status_code == 400


class TestBookingApi:
    def test_create_and_notify(self, client, notifier, open_slot):
        resp = client.post("/api/appointments", json=booking_body())

        assert resp.status_code == 201
        body = resp.json()
        assert body["jobNumber"] == 1000
        assert body["timeSlot"] == "09:00 AM"
        assert body["status"] == "scheduled"
        assert sent_events(notifier) == [BOOKING_CONFIRMED]

    def test_booking_with_technician_notifies_both(self, client, notifier, make_technician, add_recurring):
        tech = make_technician("Sam", email="sam@example.com")
        add_recurring(tech, 2, "09:00 AM")

        resp = client.post("/api/appointments", json=booking_body(mechanicId=tech.id))

        assert resp.status_code == 201
        assert resp.json()["mechanicId"] == tech.id
        assert sent_events(notifier) == [BOOKING_CONFIRMED, TECHNICIAN_ASSIGNED]

    def test_missing_fields_is_400(self, client):
        resp = client.post("/api/appointments", json={"customerName": "Pat"})
        assert resp.status_code == 400

    def test_unavailable_technician_is_409(self, client, make_technician):
        tech = make_technician()
        resp = client.post("/api/appointments", json=booking_body(mechanicId=tech.id))
        assert resp.status_code == 409
        assert "09:00 AM" in resp.json()["detail"]

    def test_slot_nobody_offers_is_409(self, client, notifier, open_slot):
        resp = client.post("/api/appointments", json=booking_body(timeSlot="02:00 PM"))

        assert resp.status_code == 409
        assert "02:00 PM" in resp.json()["detail"]
        assert sent_events(notifier) == []

    def test_email_failure_does_not_fail_booking(self, client, notifier, open_slot):
        notifier.notify.side_effect = RuntimeError("provider down")
        resp = client.post("/api/appointments", json=booking_body())
        assert resp.status_code == 201

    def test_public_fetch_and_cancel(self, client, notifier, open_slot):
        future = (datetime.now() + timedelta(days=3)).strftime("%Y-%m-%d")
        created = client.post("/api/appointments", json=booking_body(date=future)).json()

        assert client.get(f"/api/appointments/{created['id']}").json()["jobNumber"] == created["jobNumber"]

        resp = client.post(f"/api/appointments/{created['id']}/cancel")
        assert resp.status_code == 200
        assert resp.json()["appointment"]["status"] == "cancelled"
        assert APPOINTMENT_CANCELLED in sent_events(notifier)

        again = client.post(f"/api/appointments/{created['id']}/cancel")
        assert again.status_code == 409
        assert again.json()["detail"] == "Appointment is already cancelled"

    def test_unknown_appointment_is_404(self, client):
        assert client.get("/api/appointments/nope").status_code == 404


class TestManagerApi:
    def test_list_requires_manager(self, client, make_technician):
        assert client.get("/api/appointments").status_code == 401
        tech = make_technician()
        assert client.get("/api/appointments", headers=bearer(technician_caller(tech))).status_code == 403

    def test_assign_and_complete(self, client, notifier, manager_caller, make_technician, make_appointment):
        tech = make_technician("Sam", email="sam@example.com")
        appt = make_appointment()
        headers = bearer(manager_caller)

        resp = client.patch(f"/api/appointments/{appt.id}/assign", json={"mechanicId": tech.id}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["mechanicId"] == tech.id

        resp = client.patch(f"/api/appointments/{appt.id}/status", json={"status": "completed"}, headers=headers)
        assert resp.json()["status"] == "completed"
        assert sent_events(notifier) == [TECHNICIAN_ASSIGNED, JOB_COMPLETED]

    def test_status_rejects_cancelled_value(self, client, manager_caller, make_appointment):
        appt = make_appointment()
        resp = client.patch(f"/api/appointments/{appt.id}/status", json={"status": "cancelled"},
                            headers=bearer(manager_caller))
        assert resp.status_code == 400

    def test_payment_notes_follow_up(self, client, manager_caller, make_appointment):
        appt = make_appointment()
        headers = bearer(manager_caller)

        paid = client.patch(f"/api/appointments/{appt.id}/payment",
                            json={"isPaid": True, "paymentMethod": "card"}, headers=headers).json()
        assert paid["isPaid"] is True
        assert paid["paymentStatus"] == "paid"
        notes = client.patch(f"/api/appointments/{appt.id}/notes", json={"notes": "side gate"}, headers=headers)
        assert notes.json()["notes"] == "side gate"
        follow = client.patch(f"/api/appointments/{appt.id}/follow-up",
                              json={"followUpDate": "2027-02-01"}, headers=headers)
        assert follow.json()["followUpDate"] == "2027-02-01"

    def test_technician_crud(self, client, manager_caller):
        headers = bearer(manager_caller)
        created = client.post("/api/mechanics", json={"name": "Sam", "email": "Sam@Example.com",
                                                      "password": "longenough"}, headers=headers)
        assert created.status_code == 201
        tech_id = created.json()["id"]
        assert created.json()["email"] == "sam@example.com"
        assert "passwordHash" not in created.json()

        duplicate = client.post("/api/mechanics", json={"name": "Sam 2", "email": "sam@example.com"},
                                headers=headers)
        assert duplicate.status_code == 400

        updated = client.patch(f"/api/mechanics/{tech_id}", json={"isPublic": False}, headers=headers)
        assert updated.json()["isPublic"] is False
        assert client.get("/api/mechanics/public").json() == []

        assert client.delete(f"/api/mechanics/{tech_id}", headers=headers).json() == {"success": True}
        assert client.get("/api/mechanics", headers=headers).json() == []

    def test_manager_edits_recurring_schedule(self, client, manager_caller, make_technician):
        tech = make_technician()
        resp = client.post(f"/api/manager/technicians/{tech.id}/recurring-schedule",
                           json={"schedules": [{"dayOfWeek": 2, "timeSlot": "8:00 AM", "isAvailable": True}]},
                           headers=bearer(manager_caller))
        assert resp.status_code == 200
        assert resp.json()[0]["timeSlot"] == "08:00 AM"

    def test_employee_time_tracking(self, client, manager_caller, make_technician):
        tech = make_technician("Sam")
        client.post("/api/mechanic/time-entry/check-in", headers=bearer(technician_caller(tech)))

        rows = client.get("/api/manager/employee-time-tracking", headers=bearer(manager_caller)).json()

        assert rows[0]["name"] == "Sam"
        assert rows[0]["isClockedIn"] is True

    def test_customers(self, client, manager_caller, open_slot):
        client.post("/api/appointments", json=booking_body())
        headers = bearer(manager_caller)

        customers = client.get("/api/customers", headers=headers).json()
        assert [c["email"] for c in customers] == ["pat@example.com"]

        detail = client.get(f"/api/customers/{customers[0]['id']}", headers=headers).json()
        assert len(detail["appointments"]) == 1
        edited = client.patch(f"/api/customers/{customers[0]['id']}", json={"notes": "VIP"}, headers=headers)
        assert edited.json()["notes"] == "VIP"


class TestTechnicianPortalApi:
    def test_overrides_roundtrip(self, client, make_technician):
        tech = make_technician()
        headers = bearer(technician_caller(tech))

        resp = client.post("/api/mechanic/availability",
                           json={"date": TUESDAY, "timeSlot": "8:00 AM", "isAvailable": True}, headers=headers)
        assert resp.json()["timeSlot"] == "08:00 AM"
        batch = client.post("/api/mechanic/availability/batch", headers=headers, json={"availabilities": [
            {"date": TUESDAY, "timeSlot": "09:00 AM"}, {"date": TUESDAY, "timeSlot": "10:00 AM"},
        ]})
        assert len(batch.json()) == 2
        assert len(client.get("/api/mechanic/availability", headers=headers).json()) == 3

        client.delete("/api/mechanic/availability", params={"date": TUESDAY, "timeSlot": "08:00 AM"},
                      headers=headers)
        assert len(client.get("/api/mechanic/availability", headers=headers).json()) == 2

    def test_recurring_schedule_validation_message(self, client, make_technician):
        headers = bearer(technician_caller(make_technician()))
        resp = client.post("/api/mechanic/recurring-schedule", headers=headers,
                           json={"schedules": [{"dayOfWeek": 9, "timeSlot": "08:00 AM", "isAvailable": True}]})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "dayOfWeek must be 0-6"

    def test_jobs_start_complete(self, client, notifier, make_technician, make_appointment):
        tech = make_technician(email="sam@example.com")
        other = make_technician()
        mine = make_appointment(mechanic_id=tech.id)
        theirs = make_appointment(mechanic_id=other.id, time_slot="10:00 AM")
        headers = bearer(technician_caller(tech))

        jobs = client.get("/api/mechanic/jobs", headers=headers).json()
        assert [j["id"] for j in jobs] == [mine.id]

        assert client.patch(f"/api/mechanic/jobs/{mine.id}/start", headers=headers).json()["status"] == "in-progress"
        assert client.patch(f"/api/mechanic/jobs/{mine.id}/complete", headers=headers).json()["status"] == "completed"
        assert JOB_COMPLETED in sent_events(notifier)

        forbidden = client.patch(f"/api/mechanic/jobs/{theirs.id}/complete", headers=headers)
        assert forbidden.status_code == 403
        assert forbidden.json()["detail"] == "Not authorized to complete this job"

    def test_time_entries(self, client, make_technician):
        headers = bearer(technician_caller(make_technician()))

        assert client.get("/api/mechanic/time-entry/current", headers=headers).json() is None
        assert client.post("/api/mechanic/time-entry/check-in", headers=headers).status_code == 200
        again = client.post("/api/mechanic/time-entry/check-in", headers=headers)
        assert again.status_code == 409
        assert again.json()["detail"] == "Already checked in"
        assert client.get("/api/mechanic/time-entry/current", headers=headers).json()["checkOutTime"] is None
        assert client.post("/api/mechanic/time-entry/check-out", headers=headers).status_code == 200
        assert client.post("/api/mechanic/time-entry/check-out", headers=headers).status_code == 409
        assert len(client.get("/api/mechanic/time-entries", headers=headers).json()) == 1
        assert "hours" in client.get("/api/mechanic/weekly-hours", headers=headers).json()


class TestAuthApi:
    def test_manager_login_and_session(self, client, db):
        db.add(Manager(email="boss@example.com", name="Boss", password_hash=hash_password("correct-horse")))
        db.commit()

        bad = client.post("/api/manager/login", json={"email": "boss@example.com", "password": "nope"})
        assert bad.status_code == 401

        good = client.post("/api/manager/login", json={"email": "Boss@Example.com", "password": "correct-horse"})
        assert good.status_code == 200
        token = good.json()["token"]

        session = client.get("/api/manager/session", headers={"Authorization": f"Bearer {token}"})
        assert session.json()["role"] == "manager"

    def test_technician_without_password_cannot_log_in(self, client, make_technician):
        make_technician(email="sam@example.com")
        resp = client.post("/api/mechanic/login", json={"email": "sam@example.com", "password": "anything"})
        assert resp.status_code == 401

    def test_garbage_token(self, client):
        resp = client.get("/api/mechanic/session", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401

    def test_deleted_technician_token_rejected(self, client, db, make_technician):
        tech = make_technician()
        headers = bearer(technician_caller(tech))
        db.delete(tech)
        db.commit()
        assert client.get("/api/mechanic/session", headers=headers).status_code == 401


class TestHealthApi:
    def test_health_without_email(self, client):
        with patch("mobile_service.routers.health.settings.RESEND_API_KEY", None):
            body = client.get("/api/health").json()
        assert body["database"] == "ok"
        assert body["email"] == "disabled"
