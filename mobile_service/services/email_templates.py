# mobile_service/services/email_templates.py
"""
Subject + HTML body for every notification event.
Payloads are plain dicts built by notification_service.appointment_payload,
so rendering never touches the database session.
"""

from dataclasses import dataclass
from datetime import datetime
from html import escape

from mobile_service.config import settings

BOOKING_CONFIRMED = "booking_confirmed"
TECHNICIAN_ASSIGNED = "technician_assigned"
JOB_COMPLETED = "job_completed"
APPOINTMENT_CANCELLED = "appointment_cancelled"
TECHNICIAN_REMINDER = "technician_reminder"
CUSTOMER_REMINDER = "customer_reminder"

CONTACT_METHOD_LABELS = {
    "phone-text": "Phone (Text)",
    "phone-call": "Phone (Call)",
    "email": "Email",
}


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str


def _pretty_date(value: str) -> str:
    try:
        return datetime.strptime(value, "%Y-%m-%d").strftime("%A, %B %d, %Y")
    except (TypeError, ValueError):
        return value or ""


def _vehicle(p: dict) -> str:
    return escape(f"{p.get('vehicle_year', '')} {p.get('vehicle_make', '')} {p.get('vehicle_model', '')}".strip())


def _rows(pairs) -> str:
    return "".join(
        f'<p style="margin: 5px 0;"><strong>{label}:</strong> {escape(str(value))}</p>'
        for label, value in pairs if value not in (None, "")
    )


def _wrap(title: str, body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: #1a1a1a;">{escape(title)}</h2>{body}</div>'
    )


def _job_details(p: dict) -> str:
    return _rows([
        ("Date", _pretty_date(p.get("date"))),
        ("Time", p.get("time_slot")),
        ("Location", p.get("address")),
        ("Vehicle", f"{p.get('vehicle_year', '')} {p.get('vehicle_make', '')} {p.get('vehicle_model', '')}".strip()),
        ("License Plate", p.get("license_plate")),
        ("Service", p.get("service_type")),
    ])


def _cancel_link(p: dict) -> str:
    if not p.get("id"):
        return ""
    url = f"{settings.FRONTEND_URL}/cancel/{p['id']}"
    return (
        f'<p style="color: #666666; font-size: 0.9em;">Need to cancel? You can cancel up to '
        f'{settings.CANCELLATION_CUTOFF_HOURS} hours before your appointment. '
        f'<a href="{escape(url)}">Click here to cancel</a>.</p>'
    )


def _booking_confirmed(p: dict) -> list[EmailMessage]:
    when = f"{_pretty_date(p.get('date'))} at {p.get('time_slot')}"
    customer = _wrap(
        "Booking Confirmed!",
        f"<p>Hi {escape(p.get('customer_name', ''))},</p>"
        f"<p>Thanks for booking. Job #{p.get('job_number')}.</p>"
        + _job_details(p)
        + _rows([("Total", f"${p.get('price')}")])
        + _cancel_link(p),
    )
    business = _wrap(
        "New Booking Received",
        _rows([
            ("Name", p.get("customer_name")),
            ("Email", p.get("customer_email")),
            ("Phone", p.get("customer_phone")),
            ("Preferred Contact", CONTACT_METHOD_LABELS.get(p.get("preferred_contact_method"),
                                                            p.get("preferred_contact_method"))),
            ("Price", f"${p.get('price')}"),
        ]) + _job_details(p),
    )
    return [
        EmailMessage(p["customer_email"], f"Booking Confirmed - {when}", customer),
        EmailMessage(settings.BUSINESS_EMAIL,
                     f"New Booking: {p.get('customer_name')} - {_pretty_date(p.get('date'))}", business),
    ]


def _technician_job(p: dict, title: str, subject: str) -> list[EmailMessage]:
    if not p.get("technician_email"):
        return []
    body = _wrap(
        title,
        f"<p>Hi {escape(p.get('technician_name') or '')},</p>"
        + _rows([
            ("Customer", p.get("customer_name")),
            ("Phone", p.get("customer_phone")),
            ("Preferred Contact", CONTACT_METHOD_LABELS.get(p.get("preferred_contact_method"),
                                                            p.get("preferred_contact_method"))),
        ])
        + _job_details(p),
    )
    return [EmailMessage(p["technician_email"], subject, body)]


def _technician_assigned(p: dict) -> list[EmailMessage]:
    return _technician_job(p, "New Job Assigned",
                           f"New Job Assigned - {_pretty_date(p.get('date'))} at {p.get('time_slot')}")


def _technician_reminder(p: dict) -> list[EmailMessage]:
    return _technician_job(p, "You Have a Job Today",
                           f"Appointment Today - {p.get('time_slot')} - {p.get('customer_name')}")


def _customer_reminder(p: dict) -> list[EmailMessage]:
    body = _wrap(
        "Your Appointment Is Today",
        f"<p>Hi {escape(p.get('customer_name', ''))},</p>" + _job_details(p) + _cancel_link(p),
    )
    return [EmailMessage(p["customer_email"], f"Appointment Today - {p.get('time_slot')}", body)]


def _job_completed(p: dict) -> list[EmailMessage]:
    tech = p.get("technician_name")
    body = _wrap(
        "Service Completed",
        f"<p>Hi {escape(p.get('customer_name', ''))},</p>"
        f"<p>Your {escape(p.get('service_type', ''))} on the {_vehicle(p)} is done"
        + (f", serviced by {escape(tech)}" if tech else "")
        + ".</p>"
        + _rows([("Next service due", _pretty_date(p.get("follow_up_date")))]),
    )
    return [EmailMessage(p["customer_email"], f"Service Completed - {_vehicle(p)}", body)]


def _appointment_cancelled(p: dict) -> list[EmailMessage]:
    body = _wrap(
        "Appointment Cancelled",
        _rows([
            ("Job #", p.get("job_number")),
            ("Customer", p.get("customer_name")),
            ("Email", p.get("customer_email")),
            ("Phone", p.get("customer_phone")),
        ]) + _job_details(p),
    )
    return [EmailMessage(
        settings.BUSINESS_EMAIL,
        f"Appointment Cancelled - {p.get('customer_name')} - {_pretty_date(p.get('date'))}",
        body,
    )]


RENDERERS = {
    BOOKING_CONFIRMED: _booking_confirmed,
    TECHNICIAN_ASSIGNED: _technician_assigned,
    JOB_COMPLETED: _job_completed,
    APPOINTMENT_CANCELLED: _appointment_cancelled,
    TECHNICIAN_REMINDER: _technician_reminder,
    CUSTOMER_REMINDER: _customer_reminder,
}


def render(event: str, payload: dict) -> list[EmailMessage]:
    renderer = RENDERERS.get(event)
    if renderer is None:
        raise ValueError(f"Unknown notification event '{event}'")
    return renderer(payload)
