"""SQLAlchemy models for bookings and reminder delivery records."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from crm_notifications.infrastructure.database import Base
from crm_notifications.utils import now_in_app_naive_datetime


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    host_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_name = Column(String(120), nullable=False)
    guest_email = Column(String(120), nullable=False)
    meeting_type = Column(String(120), nullable=False)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="confirmed")
    location = Column(String(255), nullable=True)
    meeting_link = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    reminder_sent_at = Column(DateTime, nullable=True)


class BookingNotificationModel(Base):
    __tablename__ = "booking_notifications"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    sent_to = Column(String(20), nullable=False)
    email_sent = Column(Boolean, nullable=False, default=False)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)


__all__ = ["BookingModel", "BookingNotificationModel"]
