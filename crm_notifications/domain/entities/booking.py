"""Domain entities for meeting bookings and their reminder records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

BOOKING_STATUS_CONFIRMED = "confirmed"
BOOKING_STATUS_CANCELLED = "cancelled"

BOOKING_REMINDER_SUCCESS = "success"
BOOKING_REMINDER_ERROR = "error"


@dataclass
class Booking:
    id: int | None
    host_user_id: int
    guest_name: str
    guest_email: str
    meeting_type: str
    start_time: datetime
    end_time: datetime
    status: str = BOOKING_STATUS_CONFIRMED
    location: str | None = None
    meeting_link: str | None = None
    notes: str | None = None
    reminder_sent_at: datetime | None = None

    @property
    def duration_minutes(self) -> int:
        return round((self.end_time - self.start_time).total_seconds() / 60)


@dataclass
class BookingNotification:
    """Delivery record written for each reminder attempt."""

    id: int | None
    booking_id: int
    type: str
    sent_to: str
    email_sent: bool
    error: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class BookingReminderResult:
    booking_id: int
    status: str
    message: str


__all__ = [
    "Booking",
    "BookingNotification",
    "BookingReminderResult",
    "BOOKING_REMINDER_ERROR",
    "BOOKING_REMINDER_SUCCESS",
    "BOOKING_STATUS_CANCELLED",
    "BOOKING_STATUS_CONFIRMED",
]
