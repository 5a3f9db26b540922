"""Unit tests for the SendGrid email helpers."""

from __future__ import annotations

import json
import types
from datetime import datetime

import pytest

from crm_notifications.domain.entities import (
    Booking,
    Notification,
    NotificationPriority,
    NotificationType,
)
from crm_notifications.infrastructure import email as email_module


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "crm@example.com"
    app_public_url = "https://crm.example.com/"


class RecordingClient:
    """Stand-in for ``SendGridAPIClient`` that keeps the last message."""

    messages: list = []

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        RecordingClient.messages.append(message)
        return types.SimpleNamespace(status_code=202, body=None)


@pytest.fixture()
def configured(monkeypatch: pytest.MonkeyPatch):
    RecordingClient.messages = []
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)
    return RecordingClient


def _sent_subject(message) -> str:
    return message.get()["subject"]


def _sent_html(message) -> str:
    return message.get()["content"][0]["value"]


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    class Unconfigured:
        sendgrid_api_key = None
        sendgrid_sender = None

    monkeypatch.setattr(email_module, "get_settings", lambda: Unconfigured())

    assert email_module.send_email("Sujet", "<p>Corps</p>", "user@example.com") is False


def test_send_email_success(configured) -> None:
    assert email_module.send_email("Sujet", "<p>Corps</p>", "user@example.com") is True
    assert _sent_subject(configured.messages[0]) == "Sujet"


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    class FailingClient(RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("Sujet", "<p>Corps</p>", "user@example.com")

    assert result is False
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_unexpected_status_is_a_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    class RejectingClient(RecordingClient):
        def send(self, message):
            return types.SimpleNamespace(status_code=400, body=b"bad request")

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    assert email_module.send_email("Sujet", "<p>Corps</p>", "user@example.com") is False


def test_urgent_notification_subject_and_link(configured) -> None:
    notification = Notification(
        id=1,
        user_id=1,
        type=NotificationType.TASK_OVERDUE,
        priority=NotificationPriority.URGENT,
        title="Tâche en retard",
        message='La tâche "Devis" est en retard',
        action_url="/dashboard/projects/3",
        action_label="Voir la tâche",
    )

    assert email_module.send_notification_email(notification, "owner@example.com") is True

    message = configured.messages[0]
    assert _sent_subject(message) == "URGENT - Tâche en retard"
    assert "https://crm.example.com/dashboard/projects/3" in _sent_html(message)


def test_booking_reminder_email_lists_details(configured) -> None:
    booking = Booking(
        id=1,
        host_user_id=1,
        guest_name="Alex <Guest>",
        guest_email="guest@example.com",
        meeting_type="Démo produit",
        start_time=datetime(2025, 3, 10, 14, 0),
        end_time=datetime(2025, 3, 10, 15, 30),
        location="Bureau de Lyon",
    )

    assert email_module.send_booking_reminder_email(
        booking, recipient="guest@example.com", recipient_name=booking.guest_name
    )

    message = configured.messages[0]
    html = _sent_html(message)
    assert _sent_subject(message) == "Rappel : Démo produit le 10/03/2025 à 14:00"
    assert "1h30" in html
    assert "Bureau de Lyon" in html
    assert "Alex &lt;Guest&gt;" in html
