# mobile_service/exceptions.py
"""
Domain errors raised by the service layer.
main.py maps each class to an HTTP status; services never import FastAPI.
"""

from typing import Optional


class SchedulerError(Exception):
    """Base class. `status_code` is the HTTP status main.py responds with."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[object] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message


class InvalidRequestError(SchedulerError):
    """Malformed or missing booking/schedule fields. Raised before any write."""

    status_code = 400


class AuthorizationError(SchedulerError):
    """Missing staff session (401) or acting on someone else's job (403)."""

    def __init__(self, message: str = "Unauthorized", status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(SchedulerError):
    status_code = 404


class StateConflictError(SchedulerError):
    """
    The request is well-formed but conflicts with current state: double
    check-in, re-cancel, illegal status transition. Callers retry with
    corrected input; nothing is retried automatically.
    """

    status_code = 409


class SlotUnavailableError(StateConflictError):
    def __init__(self, date: str, time_slot: str, reason: str = "is full or unavailable"):
        super().__init__(f"The {time_slot} slot on {date} {reason}")
        self.date = date
        self.time_slot = time_slot


class NotificationError(SchedulerError):
    """Email provider failure. Logged by notification_service, never returned to a caller."""

    status_code = 502
