# tests/test_time_entry_service.py
"""Clock-in / clock-out rules and hour totals."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date, datetime
from sqlalchemy.exc import IntegrityError
from mobile_service.exceptions import StateConflictError
from mobile_service.models.time_entry import TimeEntry
from mobile_service.services import time_entry_service

MONDAY_9AM = datetime(2026, 11, 2, 9, 0)


class TestCheckInOut:
    def test_check_in_then_out(self, db, make_technician):
        tech = make_technician()
        time_entry_service.check_in(db, tech.id, now=MONDAY_9AM)
        entry = time_entry_service.check_out(db, tech.id, now=datetime(2026, 11, 2, 17, 30))

        assert entry.check_out_time == datetime(2026, 11, 2, 17, 30)
        assert time_entry_service.current_entry(db, tech.id) is None

    def test_double_check_in_rejected(self, db, make_technician):
        tech = make_technician()
        time_entry_service.check_in(db, tech.id, now=MONDAY_9AM)

        with pytest.raises(StateConflictError) as exc:
            time_entry_service.check_in(db, tech.id, now=MONDAY_9AM)

        assert exc.value.message == "Already checked in"
        assert db.query(TimeEntry).filter_by(mechanic_id=tech.id).count() == 1

    def test_open_entry_index_backs_the_rule(self, db, make_technician):
        tech = make_technician()
        db.add(TimeEntry(mechanic_id=tech.id, check_in_time=MONDAY_9AM))
        db.commit()
        db.add(TimeEntry(mechanic_id=tech.id, check_in_time=MONDAY_9AM))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_check_out_without_check_in(self, db, make_technician):
        tech = make_technician()
        with pytest.raises(StateConflictError) as exc:
            time_entry_service.check_out(db, tech.id)
        assert exc.value.message == "Not checked in"


class TestHours:
    def test_week_starts_on_sunday(self):
        assert time_entry_service.week_start(date(2026, 11, 4)) == datetime(2026, 11, 1)
        assert time_entry_service.week_start(date(2026, 11, 1)) == datetime(2026, 11, 1)

    def test_weekly_hours_counts_open_entry(self, db, make_technician):
        tech = make_technician()
        db.add(TimeEntry(mechanic_id=tech.id, check_in_time=datetime(2026, 11, 2, 8, 0),
                         check_out_time=datetime(2026, 11, 2, 12, 0)))
        db.add(TimeEntry(mechanic_id=tech.id, check_in_time=datetime(2026, 11, 3, 8, 0)))
        # Last week, ignored
        db.add(TimeEntry(mechanic_id=tech.id, check_in_time=datetime(2026, 10, 30, 8, 0),
                         check_out_time=datetime(2026, 10, 30, 16, 0)))
        db.commit()

        assert time_entry_service.weekly_hours(db, tech.id, now=datetime(2026, 11, 3, 9, 30)) == 5.5

    def test_clock_overview(self, db, make_technician):
        on = make_technician("On")
        make_technician("Off")
        time_entry_service.check_in(db, on.id, now=MONDAY_9AM)

        overview = {row["technician"].name: row
                    for row in time_entry_service.clock_overview(db, now=datetime(2026, 11, 2, 10, 0))}

        assert overview["On"]["is_clocked_in"] is True
        assert overview["On"]["weekly_hours"] == 1.0
        assert overview["Off"]["is_clocked_in"] is False
