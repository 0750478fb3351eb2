# tests/test_notification_service.py
"""Email rendering and delivery through the Resend API (httpx mocked)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
import httpx
from mobile_service.exceptions import NotificationError
from mobile_service.services.email_templates import (
    APPOINTMENT_CANCELLED, BOOKING_CONFIRMED, TECHNICIAN_ASSIGNED, render,
)
from mobile_service.services.notification_service import (
    EmailNotifier, appointment_payload, send_safely,
)


def make_payload(**overrides):
    payload = {
        "id": "appt-1",
        "job_number": 42,
        "customer_name": "Pat",
        "customer_email": "pat@example.com",
        "customer_phone": "555-0100",
        "preferred_contact_method": "phone-text",
        "vehicle_year": "2018",
        "vehicle_make": "Honda",
        "vehicle_model": "Civic",
        "service_type": "Standard Blend",
        "price": 59,
        "date": "2026-11-03",
        "time_slot": "09:00 AM",
        "address": "1 Main St",
    }
    payload.update(overrides)
    return payload


def mock_http(status_code=200):
    client = AsyncMock()
    response = MagicMock(status_code=status_code, text="provider says no")
    response.json.return_value = {"id": "email-1"}
    client.post.return_value = response
    client_cls = MagicMock()
    client_cls.return_value.__aenter__.return_value = client
    return client_cls, client


class TestTemplates:
    def test_booking_goes_to_customer_and_business(self):
        messages = render(BOOKING_CONFIRMED, make_payload())
        assert [m.to for m in messages][0] == "pat@example.com"
        assert len(messages) == 2
        assert "Tuesday, November 03, 2026" in messages[0].html
        assert "/cancel/appt-1" in messages[0].html

    def test_technician_event_without_email_renders_nothing(self):
        assert render(TECHNICIAN_ASSIGNED, make_payload()) == []

    def test_customer_values_are_escaped(self):
        messages = render(APPOINTMENT_CANCELLED, make_payload(customer_name="<b>Pat</b>"))
        assert "<b>Pat</b>" not in messages[0].html

    def test_unknown_event(self):
        with pytest.raises(ValueError):
            render("fax_sent", make_payload())


class TestEmailNotifier:
    @pytest.mark.asyncio
    async def test_skipped_without_api_key(self):
        client_cls, client = mock_http()
        with patch("mobile_service.services.notification_service.httpx.AsyncClient", client_cls):
            result = await EmailNotifier(api_key="").notify(BOOKING_CONFIRMED, make_payload())

        assert result["skipped"] is True
        client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_every_message(self):
        client_cls, client = mock_http()
        with patch("mobile_service.services.notification_service.httpx.AsyncClient", client_cls):
            result = await EmailNotifier(api_key="re_test").notify(BOOKING_CONFIRMED, make_payload())

        assert result["sent"] == 2
        assert client.post.await_count == 2
        headers = client.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer re_test"

    @pytest.mark.asyncio
    async def test_provider_error_raises(self):
        client_cls, _ = mock_http(status_code=422)
        with patch("mobile_service.services.notification_service.httpx.AsyncClient", client_cls):
            with pytest.raises(NotificationError):
                await EmailNotifier(api_key="re_test").notify(BOOKING_CONFIRMED, make_payload())

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        client_cls, client = mock_http()
        client.post.side_effect = httpx.ConnectError("refused")
        with patch("mobile_service.services.notification_service.httpx.AsyncClient", client_cls):
            with pytest.raises(NotificationError):
                await EmailNotifier(api_key="re_test").notify(BOOKING_CONFIRMED, make_payload())

    @pytest.mark.asyncio
    async def test_invalid_recipient(self):
        client_cls, _ = mock_http()
        with patch("mobile_service.services.notification_service.httpx.AsyncClient", client_cls):
            with pytest.raises(NotificationError):
                await EmailNotifier(api_key="re_test").notify(
                    BOOKING_CONFIRMED, make_payload(customer_email="nobody")
                )


class TestSendSafely:
    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self):
        notifier = MagicMock()
        notifier.notify = AsyncMock(side_effect=NotificationError("boom"))
        assert await send_safely(notifier, BOOKING_CONFIRMED, make_payload()) is False

    @pytest.mark.asyncio
    async def test_unexpected_error_is_swallowed(self):
        notifier = MagicMock()
        notifier.notify = AsyncMock(side_effect=RuntimeError("bug"))
        assert await send_safely(notifier, BOOKING_CONFIRMED, make_payload()) is False

    @pytest.mark.asyncio
    async def test_success(self):
        notifier = MagicMock()
        notifier.notify = AsyncMock(return_value={"success": True})
        assert await send_safely(notifier, BOOKING_CONFIRMED, make_payload()) is True


class TestAppointmentPayload:
    def test_includes_technician(self, make_appointment, make_technician):
        tech = make_technician("Sam", email="sam@example.com")
        appt = make_appointment(mechanic_id=tech.id)

        payload = appointment_payload(appt, tech)

        assert payload["technician_email"] == "sam@example.com"
        assert payload["job_number"] == appt.job_number
        assert isinstance(payload["created_at"], str)
