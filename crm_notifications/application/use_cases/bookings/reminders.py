"""Reminders for bookings that start soon.

Each booking is handled on its own, and within a booking each participant
(guest, host) is handled on its own: every attempt leaves a delivery record,
and a participant who already received the reminder is not emailed again on
the next run. A booking gets ``reminder_sent_at`` once every participant has
been reached, and is then no longer selected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crm_notifications.application.errors import ApplicationError, StoreError
from crm_notifications.domain.entities import (
    BOOKING_REMINDER_ERROR,
    BOOKING_REMINDER_SUCCESS,
    Booking,
    BookingNotification,
    BookingReminderResult,
    User,
)
from crm_notifications.infrastructure.email import send_booking_reminder_email
from crm_notifications.infrastructure.repositories import BookingRepository, UserRepository
from crm_notifications.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

REMINDER_TYPE = "reminder"
RECIPIENT_GUEST = "guest"
RECIPIENT_HOST = "host"


class BookingReminderDeliveryError(ApplicationError):
    """The reminder email could not be sent to a participant."""


ReminderSender = Callable[[Booking, str, str], None]


def deliver_booking_reminder(booking: Booking, recipient: str, recipient_name: str) -> None:
    """Email the reminder for ``booking`` to one participant.

    Raises :class:`BookingReminderDeliveryError` when the email is not sent.
    """

    if not send_booking_reminder_email(
        booking, recipient=recipient, recipient_name=recipient_name
    ):
        raise BookingReminderDeliveryError(f"Échec de l'envoi du rappel à {recipient}")


@dataclass
class BookingReminderRun:
    results: list[BookingReminderResult] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.results)

    @property
    def sent(self) -> int:
        return sum(1 for result in self.results if result.status == BOOKING_REMINDER_SUCCESS)


def list_upcoming_reminders(
    session: Session,
    *,
    now: datetime | None = None,
    lead: timedelta = timedelta(hours=1),
) -> Sequence[Booking]:
    """Return confirmed bookings starting within ``lead`` that were not reminded."""

    now = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
    try:
        return BookingRepository(session).list_pending_reminders(now, now + lead)
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de récupérer les rendez-vous", details=str(exc)) from exc


def send_booking_reminders(
    session: Session,
    *,
    now: datetime | None = None,
    lead: timedelta = timedelta(hours=1),
    sender: ReminderSender = deliver_booking_reminder,
) -> BookingReminderRun:
    """Send one reminder per pending booking and report each outcome."""

    now = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
    bookings = list_upcoming_reminders(session, now=now, lead=lead)
    logger.info("Found %s bookings that need reminders", len(bookings))

    run = BookingReminderRun()
    for booking in bookings:
        run.results.append(_remind(session, booking, now=now, sender=sender))

    logger.info(
        "Booking reminders finished: %s sent out of %s", run.sent, run.total_processed
    )
    return run


def _recipients(booking: Booking, host: User | None) -> list[tuple[str, str, str]]:
    recipients = [(RECIPIENT_GUEST, booking.guest_email, booking.guest_name)]
    if host is not None and host.email:
        recipients.append((RECIPIENT_HOST, host.email, host.name))
    return recipients


def _remind(
    session: Session, booking: Booking, *, now: datetime, sender: ReminderSender
) -> BookingReminderResult:
    bookings = BookingRepository(session)
    errors: list[str] = []
    try:
        host = UserRepository(session).get(booking.host_user_id)
        delivered = bookings.delivered_recipients(booking.id, REMINDER_TYPE)
        for role, email, name in _recipients(booking, host):
            if role in delivered:
                continue
            error = _send_to(sender, booking, email, name)
            bookings.record_notifications(
                [
                    BookingNotification(
                        id=None,
                        booking_id=booking.id,
                        type=REMINDER_TYPE,
                        sent_to=role,
                        email_sent=error is None,
                        error=error,
                    )
                ]
            )
            if error is not None:
                errors.append(error)
        if not errors:
            bookings.mark_reminder_sent(booking.id, now)
    except (SQLAlchemyError, ValueError) as exc:
        session.rollback()
        logger.exception("Could not record the reminder for booking %s", booking.id)
        return BookingReminderResult(
            booking_id=booking.id,
            status=BOOKING_REMINDER_ERROR,
            message=f"Impossible d'enregistrer le rappel : {exc}",
        )

    if errors:
        return BookingReminderResult(
            booking_id=booking.id, status=BOOKING_REMINDER_ERROR, message="; ".join(errors)
        )
    logger.info("Reminder sent for booking %s", booking.id)
    return BookingReminderResult(
        booking_id=booking.id, status=BOOKING_REMINDER_SUCCESS, message="Rappel envoyé"
    )


def _send_to(sender: ReminderSender, booking: Booking, email: str, name: str) -> str | None:
    try:
        sender(booking, email, name)
    except Exception as exc:  # a failing participant must not block the others
        logger.exception("Failed to send reminder for booking %s to %s", booking.id, email)
        if isinstance(exc, ApplicationError):
            return exc.message
        return str(exc) or exc.__class__.__name__
    return None


__all__ = [
    "BookingReminderDeliveryError",
    "BookingReminderRun",
    "RECIPIENT_GUEST",
    "RECIPIENT_HOST",
    "ReminderSender",
    "deliver_booking_reminder",
    "list_upcoming_reminders",
    "send_booking_reminders",
]
