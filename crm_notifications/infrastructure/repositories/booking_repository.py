"""Persistence helpers for bookings and reminder delivery records."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crm_notifications.domain.entities import (
    BOOKING_STATUS_CONFIRMED,
    Booking,
    BookingNotification,
)
from crm_notifications.infrastructure.models import BookingModel, BookingNotificationModel
from crm_notifications.utils import ensure_app_naive_datetime, ensure_app_timezone


class BookingRepository:
    """Provide the queries used by the reminder job."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, booking_id: int) -> Booking | None:
        model = self.session.get(BookingModel, booking_id)
        return self._to_entity(model) if model else None

    def list_pending_reminders(self, start: datetime, end: datetime) -> Sequence[Booking]:
        """Return confirmed bookings starting in ``[start, end)`` not yet reminded."""

        query = (
            self.session.query(BookingModel)
            .filter(BookingModel.status == BOOKING_STATUS_CONFIRMED)
            .filter(BookingModel.reminder_sent_at.is_(None))
            .filter(BookingModel.start_time >= ensure_app_naive_datetime(start))
            .filter(BookingModel.start_time < ensure_app_naive_datetime(end))
            .order_by(BookingModel.start_time.asc(), BookingModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def mark_reminder_sent(self, booking_id: int, when: datetime) -> None:
        model = self.session.get(BookingModel, booking_id)
        if model is None:
            msg = f"Booking with id {booking_id} not found"
            raise ValueError(msg)
        model.reminder_sent_at = ensure_app_naive_datetime(when)
        self._commit()

    def record_notifications(self, records: Sequence[BookingNotification]) -> None:
        for record in records:
            self.session.add(
                BookingNotificationModel(
                    booking_id=record.booking_id,
                    type=record.type,
                    sent_to=record.sent_to,
                    email_sent=record.email_sent,
                    error=record.error,
                )
            )
        self._commit()

    def delivered_recipients(self, booking_id: int, type: str) -> set[str]:
        """Return the ``sent_to`` values that already received ``type``."""

        rows = (
            self.session.query(BookingNotificationModel.sent_to)
            .filter(BookingNotificationModel.booking_id == booking_id)
            .filter(BookingNotificationModel.type == type)
            .filter(BookingNotificationModel.email_sent.is_(True))
            .all()
        )
        return {row.sent_to for row in rows}

    def list_notifications(self, booking_id: int) -> Sequence[BookingNotification]:
        query = (
            self.session.query(BookingNotificationModel)
            .filter(BookingNotificationModel.booking_id == booking_id)
            .order_by(BookingNotificationModel.id.asc())
        )
        return [
            BookingNotification(
                id=model.id,
                booking_id=model.booking_id,
                type=model.type,
                sent_to=model.sent_to,
                email_sent=bool(model.email_sent),
                error=model.error,
                created_at=ensure_app_timezone(model.created_at),
            )
            for model in query.all()
        ]

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    @staticmethod
    def _to_entity(model: BookingModel) -> Booking:
        return Booking(
            id=model.id,
            host_user_id=model.host_user_id,
            guest_name=model.guest_name,
            guest_email=model.guest_email,
            meeting_type=model.meeting_type,
            start_time=ensure_app_timezone(model.start_time),
            end_time=ensure_app_timezone(model.end_time),
            status=model.status,
            location=model.location,
            meeting_link=model.meeting_link,
            notes=model.notes,
            reminder_sent_at=ensure_app_timezone(model.reminder_sent_at),
        )


__all__ = ["BookingRepository"]
