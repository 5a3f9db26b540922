"""Use cases for booking reminders."""

from .reminders import (
    BookingReminderDeliveryError,
    BookingReminderRun,
    deliver_booking_reminder,
    list_upcoming_reminders,
    send_booking_reminders,
)

__all__ = [
    "BookingReminderDeliveryError",
    "BookingReminderRun",
    "deliver_booking_reminder",
    "list_upcoming_reminders",
    "send_booking_reminders",
]
