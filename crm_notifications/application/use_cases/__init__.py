"""Aggregate application use cases."""

from .bookings import send_booking_reminders
from .notifications import create_notification, run_notification_checks
from .prospects import update_prospect
from .users import authenticate_user, record_login

__all__ = [
    "authenticate_user",
    "create_notification",
    "record_login",
    "run_notification_checks",
    "send_booking_reminders",
    "update_prospect",
]
