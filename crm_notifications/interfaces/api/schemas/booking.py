"""Schemas returned by the booking reminder endpoints."""

from datetime import datetime

from pydantic import BaseModel


class BookingReminderResultRead(BaseModel):
    booking_id: int
    status: str
    message: str


class BookingReminderRunResponse(BaseModel):
    success: bool
    message: str
    results: list[BookingReminderResultRead]
    total_processed: int


class UpcomingBookingRead(BaseModel):
    id: int
    host_user_id: int
    guest_name: str
    guest_email: str
    meeting_type: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    location: str | None = None
    meeting_link: str | None = None


class UpcomingRemindersResponse(BaseModel):
    bookings: list[UpcomingBookingRead]
    count: int
