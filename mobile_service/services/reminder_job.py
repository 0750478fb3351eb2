# mobile_service/services/reminder_job.py
"""
Daily reminder job: emails each technician and customer about today's visits.

Runs inside the API process as one asyncio task: sleeps until the next
REMINDER_HOUR, sends, then re-arms 24 h later. A firing missed while the
process was down is skipped, not replayed.

Started by main.py on startup and stopped on shutdown.
"""

import asyncio
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from mobile_service.config import settings
from mobile_service.database import SessionLocal
from mobile_service.models.technician import Technician
from mobile_service.services.appointment_service import appointments_on
from mobile_service.services.email_templates import CUSTOMER_REMINDER, TECHNICIAN_REMINDER
from mobile_service.services.notification_service import Notifier, appointment_payload, get_notifier
from mobile_service.utils.logger import get_logger
from mobile_service.utils.time_slots import format_calendar_date

logger = get_logger(__name__)

_MISSING_SCHEMA_MARKERS = ("no such table", "does not exist", "undefined table")


def seconds_until_next_run(now: datetime, hour: int) -> float:
    """Seconds from `now` to the next `hour`:00 local time (tomorrow if already past)."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


def _is_missing_schema(error: Exception) -> bool:
    return any(marker in str(error).lower() for marker in _MISSING_SCHEMA_MARKERS)


class ReminderJob:
    def __init__(self, notifier: Optional[Notifier] = None,
                 session_factory: Callable[[], Session] = SessionLocal,
                 hour: Optional[int] = None):
        self.notifier = notifier or get_notifier()
        self.session_factory = session_factory
        self.hour = settings.REMINDER_HOUR if hour is None else hour
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Schedule the loop on the running event loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="reminder-job")
        logger.info(f"[REMINDER] Scheduled daily at {self.hour:02d}:00")

    async def stop(self):
        if not self.running:
            self._task = None
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("[REMINDER] Stopped")

    async def _loop(self):
        while True:
            delay = seconds_until_next_run(datetime.now(), self.hour)
            logger.debug(f"[REMINDER] Next run in {delay / 3600:.1f} h")
            await asyncio.sleep(delay)
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"[REMINDER] Run failed: {e}", exc_info=True)

    async def run_once(self, today: Optional[date] = None) -> dict:
        """
        Send reminders for today's scheduled appointments.
        Returns counts; one failed appointment never stops the rest.
        """
        day = format_calendar_date(today or date.today())
        summary = {"date": day, "appointments": 0, "sent": 0, "failed": 0, "skipped": False}

        db = self.session_factory()
        try:
            try:
                appointments = appointments_on(db, day)
            except (OperationalError, ProgrammingError) as e:
                if not _is_missing_schema(e):
                    raise
                logger.warning(f"[REMINDER] Appointments table not ready, skipping run: {e.orig}")
                summary["skipped"] = True
                return summary

            summary["appointments"] = len(appointments)
            logger.info(f"[REMINDER] {len(appointments)} appointment(s) on {day}")

            for appointment in appointments:
                technician = db.get(Technician, appointment.mechanic_id) if appointment.mechanic_id else None
                payload = appointment_payload(appointment, technician)
                events = [CUSTOMER_REMINDER]
                if technician is not None and technician.email:
                    events.insert(0, TECHNICIAN_REMINDER)
                for event in events:
                    try:
                        await self.notifier.notify(event, payload)
                        summary["sent"] += 1
                    except Exception as e:
                        summary["failed"] += 1
                        logger.error(f"[REMINDER] {event} failed for job #{appointment.job_number}: {e}")
        finally:
            db.close()

        logger.info(f"[REMINDER] Done: sent={summary['sent']} failed={summary['failed']}")
        return summary
