# mobile_service/services/notification_service.py
"""
Outbound notifications. Callers only ever use notify(event, payload).

EmailNotifier sends through the Resend REST API with httpx. Without
RESEND_API_KEY every message is logged and skipped, which is the normal
state in development.

Delivery failures never reach the caller of the mutation that triggered them:
routers schedule send_safely() as a background task, and the reminder job
wraps each call itself.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from mobile_service.config import settings
from mobile_service.exceptions import NotificationError
from mobile_service.models.appointment import Appointment
from mobile_service.models.technician import Technician
from mobile_service.services.email_templates import render
from mobile_service.utils.logger import get_logger

logger = get_logger(__name__)


class Notifier(ABC):
    @abstractmethod
    async def notify(self, event: str, payload: dict) -> dict:
        """Deliver one event. Raises NotificationError on provider failure."""


class EmailNotifier(Notifier):
    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None,
                 sender: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.api_url = api_url or settings.RESEND_API_URL
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.EMAIL_TIMEOUT_SECONDS

    async def notify(self, event: str, payload: dict) -> dict:
        messages = render(event, payload)
        if not messages:
            logger.info(f"[EMAIL] {event}: no recipient, nothing sent")
            return {"success": True, "skipped": True, "sent": 0}

        if not self.api_key:
            for m in messages:
                logger.warning(f"[EMAIL] RESEND_API_KEY not set, would send '{m.subject}' to {m.to}")
            return {"success": True, "skipped": True, "sent": 0}

        ids = []
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for m in messages:
                if not m.to or "@" not in m.to:
                    raise NotificationError(f"Invalid recipient '{m.to}' for {event}")
                try:
                    response = await client.post(
                        self.api_url,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json={"from": self.sender, "to": [m.to], "subject": m.subject, "html": m.html},
                    )
                except httpx.HTTPError as e:
                    raise NotificationError(f"Email provider unreachable: {e}")
                if response.status_code >= 400:
                    raise NotificationError(
                        f"Email provider returned HTTP {response.status_code} for {event}",
                        detail=response.text,
                    )
                ids.append(response.json().get("id"))
                logger.info(f"[EMAIL] {event} → {m.to} (id={ids[-1]})")

        return {"success": True, "skipped": False, "sent": len(ids), "ids": ids}


async def send_safely(notifier: Notifier, event: str, payload: dict) -> bool:
    """Fire-and-forget wrapper: logs every failure, never raises."""
    try:
        await notifier.notify(event, payload)
        return True
    except NotificationError as e:
        logger.error(f"[EMAIL] {event} failed for appointment {payload.get('id')}: {e.message}")
    except Exception as e:
        logger.error(f"[EMAIL] {event} crashed for appointment {payload.get('id')}: {e}", exc_info=True)
    return False


def appointment_payload(appointment: Appointment, technician: Optional[Technician] = None) -> dict:
    """Detached snapshot of an appointment for templates and background tasks."""
    payload = {
        column.name: getattr(appointment, column.name)
        for column in Appointment.__table__.columns
    }
    payload["created_at"] = appointment.created_at.isoformat() if appointment.created_at else None
    if technician is not None:
        payload["technician_name"] = technician.name
        payload["technician_email"] = technician.email
    return payload


_default_notifier = EmailNotifier()


def get_notifier() -> Notifier:
    """FastAPI dependency. Overridden in tests."""
    return _default_notifier
