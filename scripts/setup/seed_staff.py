# scripts/setup/seed_staff.py
"""
Create a manager login and (optionally) a technician with a Mon-Fri template.
Existing accounts with the same email are left alone.
Usage:
  python scripts/setup/seed_staff.py --manager-email boss@example.com --manager-password secret123
  python scripts/setup/seed_staff.py --tech-email tech@example.com --tech-password secret123 --tech-name "Sam"
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from mobile_service.auth import hash_password
from mobile_service.config import settings
from mobile_service.database import SessionLocal, create_tables
from mobile_service.models.manager import Manager
from mobile_service.services.schedule_service import RecurringSlot, replace_recurring_schedule
from mobile_service.services.technician_service import create_technician, get_technician_by_email


def seed_manager(db, email: str, password: str, name: str):
    email = email.strip().lower()
    if db.query(Manager).filter(Manager.email == email).first():
        print(f"Manager {email} already exists, skipped")
        return
    db.add(Manager(email=email, name=name, password_hash=hash_password(password)))
    db.commit()
    print(f"Manager {email} created")


def seed_technician(db, email: str, password: str, name: str):
    email = email.strip().lower()
    if get_technician_by_email(db, email):
        print(f"Technician {email} already exists, skipped")
        return
    technician = create_technician(db, {"name": name, "email": email}, hash_password(password))
    weekdays = [RecurringSlot(day, slot, True) for day in range(1, 6) for slot in settings.TIME_SLOTS]
    replace_recurring_schedule(db, technician.id, weekdays)
    print(f"Technician {email} created with a Mon-Fri template ({len(weekdays)} slots)")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed staff accounts")
    parser.add_argument("--manager-email")
    parser.add_argument("--manager-password")
    parser.add_argument("--manager-name", default="Manager")
    parser.add_argument("--tech-email")
    parser.add_argument("--tech-password")
    parser.add_argument("--tech-name", default="Technician")
    args = parser.parse_args()

    create_tables()
    session = SessionLocal()
    try:
        if args.manager_email and args.manager_password:
            seed_manager(session, args.manager_email, args.manager_password, args.manager_name)
        if args.tech_email and args.tech_password:
            seed_technician(session, args.tech_email, args.tech_password, args.tech_name)
    finally:
        session.close()
