"""Endpoints triggering booking reminders."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from crm_notifications.application.errors import ApplicationError
from crm_notifications.application.use_cases.bookings import (
    list_upcoming_reminders,
    send_booking_reminders,
)
from crm_notifications.config import get_settings
from crm_notifications.infrastructure.database import get_db
from crm_notifications.interfaces.api.dependencies import require_cron_secret
from crm_notifications.interfaces.api.errors import to_http_exception
from crm_notifications.interfaces.api.schemas import (
    BookingReminderResultRead,
    BookingReminderRunResponse,
    UpcomingBookingRead,
    UpcomingRemindersResponse,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])
logger = logging.getLogger(__name__)


def _reminder_lead() -> timedelta:
    return timedelta(minutes=get_settings().booking_reminder_lead_minutes)


@router.post("/reminders", response_model=BookingReminderRunResponse)
def send_reminders(
    _: None = Depends(require_cron_secret),
    db: Session = Depends(get_db),
) -> BookingReminderRunResponse:
    """Email a reminder for every confirmed booking starting soon."""

    try:
        run = send_booking_reminders(db, lead=_reminder_lead())
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return BookingReminderRunResponse(
        success=True,
        message=f"{run.sent} rappel(s) envoyé(s) sur {run.total_processed}",
        results=[
            BookingReminderResultRead(
                booking_id=result.booking_id, status=result.status, message=result.message
            )
            for result in run.results
        ],
        total_processed=run.total_processed,
    )


@router.get("/reminders", response_model=UpcomingRemindersResponse)
def upcoming_reminders(
    _: None = Depends(require_cron_secret),
    db: Session = Depends(get_db),
) -> UpcomingRemindersResponse:
    """List the bookings the next reminder run would pick up."""

    try:
        bookings = list_upcoming_reminders(db, lead=_reminder_lead())
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return UpcomingRemindersResponse(
        bookings=[
            UpcomingBookingRead(
                id=booking.id,
                host_user_id=booking.host_user_id,
                guest_name=booking.guest_name,
                guest_email=booking.guest_email,
                meeting_type=booking.meeting_type,
                start_time=booking.start_time,
                end_time=booking.end_time,
                location=booking.location,
                meeting_link=booking.meeting_link,
            )
            for booking in bookings
        ],
        count=len(bookings),
    )
