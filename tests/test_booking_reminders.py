"""Booking reminders: selection window and per-booking isolation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from crm_notifications.application.use_cases.bookings import (
    BookingReminderDeliveryError,
    deliver_booking_reminder,
    list_upcoming_reminders,
    send_booking_reminders,
)
from crm_notifications.application.use_cases.bookings import reminders
from crm_notifications.infrastructure.repositories import BookingRepository


def test_selection_window(session, now, add_user, add_booking) -> None:
    host = add_user()
    inside = add_booking(host_user_id=host, start_time=now + timedelta(minutes=30))
    at_now = add_booking(host_user_id=host, start_time=now)
    add_booking(host_user_id=host, start_time=now + timedelta(minutes=60))
    add_booking(host_user_id=host, start_time=now - timedelta(minutes=1))
    add_booking(host_user_id=host, start_time=now + timedelta(minutes=10), status="cancelled")
    add_booking(
        host_user_id=host,
        start_time=now + timedelta(minutes=10),
        reminder_sent_at=now - timedelta(minutes=5),
    )

    upcoming = list_upcoming_reminders(session, now=now)

    assert [booking.id for booking in upcoming] == [at_now, inside]


def test_one_failure_does_not_block_other_bookings(session, now, add_user, add_booking) -> None:
    host = add_user(email="host@example.com")
    ids = [
        add_booking(host_user_id=host, start_time=now + timedelta(minutes=minutes))
        for minutes in (10, 20, 30)
    ]
    calls: list[tuple[int, str]] = []

    def sender(booking, recipient, recipient_name):
        calls.append((booking.id, recipient))
        if booking.id == ids[1] and recipient == "guest@example.com":
            raise BookingReminderDeliveryError("Échec de l'envoi")

    run = send_booking_reminders(session, now=now, sender=sender)

    assert calls == [
        (booking_id, recipient)
        for booking_id in ids
        for recipient in ("guest@example.com", "host@example.com")
    ]
    assert run.total_processed == 3
    assert run.sent == 2
    assert [(result.booking_id, result.status) for result in run.results] == [
        (ids[0], "success"),
        (ids[1], "error"),
        (ids[2], "success"),
    ]
    assert run.results[1].message == "Échec de l'envoi"

    repository = BookingRepository(session)
    assert repository.get(ids[0]).reminder_sent_at == now
    assert repository.get(ids[1]).reminder_sent_at is None
    assert [(r.sent_to, r.email_sent) for r in repository.list_notifications(ids[0])] == [
        ("guest", True),
        ("host", True),
    ]
    failed_records = repository.list_notifications(ids[1])
    assert [(r.sent_to, r.email_sent, r.error) for r in failed_records] == [
        ("guest", False, "Échec de l'envoi"),
        ("host", True, None),
    ]


def test_host_failure_is_retried_without_emailing_the_guest_again(
    session, now, add_user, add_booking
) -> None:
    host = add_user(email="host@example.com")
    booking_id = add_booking(host_user_id=host, start_time=now + timedelta(minutes=40))
    sent: list[str] = []
    host_down = {"value": True}

    def sender(booking, recipient, recipient_name):
        if recipient == "host@example.com" and host_down["value"]:
            raise BookingReminderDeliveryError("Échec de l'envoi du rappel à host@example.com")
        sent.append(recipient)

    first = send_booking_reminders(session, now=now, sender=sender)
    host_down["value"] = False
    second = send_booking_reminders(session, now=now + timedelta(minutes=5), sender=sender)
    third = send_booking_reminders(session, now=now + timedelta(minutes=10), sender=sender)

    assert first.results[0].status == "error"
    assert second.results[0].status == "success"
    assert third.total_processed == 0
    assert sent == ["guest@example.com", "host@example.com"]

    repository = BookingRepository(session)
    assert [
        (r.sent_to, r.email_sent, r.error) for r in repository.list_notifications(booking_id)
    ] == [
        ("guest", True, None),
        ("host", False, "Échec de l'envoi du rappel à host@example.com"),
        ("host", True, None),
    ]
    assert repository.get(booking_id).reminder_sent_at == now + timedelta(minutes=5)


def test_reminded_bookings_are_not_sent_twice(session, now, add_user, add_booking) -> None:
    host = add_user()
    booking_id = add_booking(host_user_id=host, start_time=now + timedelta(minutes=15))
    sent: list[int] = []

    def sender(booking, recipient, recipient_name):
        sent.append(booking.id)

    first = send_booking_reminders(session, now=now, sender=sender)
    second = send_booking_reminders(session, now=now + timedelta(minutes=5), sender=sender)

    assert first.total_processed == 1
    assert second.total_processed == 0
    assert sent == [booking_id, booking_id]


def test_deliver_emails_the_given_recipient(
    session, now, add_user, add_booking, monkeypatch: pytest.MonkeyPatch
) -> None:
    host_id = add_user()
    booking = BookingRepository(session).get(
        add_booking(host_user_id=host_id, start_time=now + timedelta(minutes=15))
    )
    recipients: list[tuple[str, str]] = []
    monkeypatch.setattr(
        reminders,
        "send_booking_reminder_email",
        lambda booking, *, recipient, recipient_name: recipients.append(
            (recipient, recipient_name)
        )
        or True,
    )

    deliver_booking_reminder(booking, "guest@example.com", "Alex Guest")

    assert recipients == [("guest@example.com", "Alex Guest")]


def test_deliver_raises_when_email_fails(
    session, now, add_user, add_booking, monkeypatch: pytest.MonkeyPatch
) -> None:
    host_id = add_user()
    booking = BookingRepository(session).get(
        add_booking(host_user_id=host_id, start_time=now + timedelta(minutes=15))
    )
    monkeypatch.setattr(
        reminders, "send_booking_reminder_email", lambda booking, **_: False
    )

    with pytest.raises(BookingReminderDeliveryError):
        deliver_booking_reminder(booking, "guest@example.com", "Alex Guest")
