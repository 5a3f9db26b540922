"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crm_notifications.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationPriority,
    NotificationSort,
    NotificationSortField,
    NotificationType,
    SortDirection,
)
from crm_notifications.infrastructure.models import NotificationModel
from crm_notifications.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

_PRIORITY_ORDER = case(
    {priority.value: priority.rank for priority in NotificationPriority},
    value=NotificationModel.priority,
    else_=-1,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects.

    Every write commits immediately; on a database error the session is
    rolled back and the error re-raised to the caller.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: int,
        *,
        filters: NotificationFilters | None = None,
        sort: NotificationSort | None = None,
        limit: int | None = 50,
        offset: int = 0,
    ) -> Sequence[Notification]:
        filters = filters or NotificationFilters()
        sort = sort or NotificationSort()

        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if filters.types:
            query = query.filter(
                NotificationModel.type.in_([item.value for item in filters.types])
            )
        if filters.priorities:
            query = query.filter(
                NotificationModel.priority.in_([item.value for item in filters.priorities])
            )
        if filters.is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(filters.is_read))
        if filters.created_from is not None:
            query = query.filter(
                NotificationModel.created_at >= ensure_app_naive_datetime(filters.created_from)
            )
        if filters.created_to is not None:
            query = query.filter(
                NotificationModel.created_at <= ensure_app_naive_datetime(filters.created_to)
            )

        if sort.field is NotificationSortField.PRIORITY:
            key = _PRIORITY_ORDER
        elif sort.field is NotificationSortField.TYPE:
            key = NotificationModel.type
        else:
            key = NotificationModel.created_at
        if sort.direction is SortDirection.ASC:
            query = query.order_by(key.asc(), NotificationModel.id.asc())
        else:
            query = query.order_by(key.desc(), NotificationModel.id.desc())

        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def find_unread_for_source(
        self,
        *,
        user_id: int,
        type: NotificationType,
        source_entity_id: str,
    ) -> Notification | None:
        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.type == type.value)
            .filter(NotificationModel.source_entity_id == source_entity_id)
            .filter(NotificationModel.is_read.is_(False))
            .first()
        )
        return self._to_entity(model) if model else None

    def count_for_user(self, user_id: int, *, is_read: bool | None = None) -> int:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(is_read))
        return query.count()

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self._commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def set_read(self, notification_id: int, *, user_id: int, is_read: bool) -> Notification | None:
        """Set the read flag on one of ``user_id``'s notifications."""

        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.user_id == user_id)
            .first()
        )
        if model is None:
            return None
        if model.is_read != is_read:
            model.is_read = is_read
            self._commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_as_read(self, *, user_id: int) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self._commit()
        return updated

    def delete(self, notification_id: int, *, user_id: int) -> bool:
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            .delete(synchronize_session=False)
        )
        self._commit()
        return bool(deleted)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.user_id = notification.user_id
        model.type = NotificationType(notification.type).value
        model.priority = NotificationPriority(notification.priority).value
        model.title = notification.title
        model.message = notification.message
        model.data = notification.data or None
        model.source_entity_id = notification.source_entity_id
        model.is_read = notification.is_read
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)
        model.action_url = notification.action_url
        model.action_label = notification.action_label

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=NotificationType(model.type),
            priority=NotificationPriority(model.priority),
            title=model.title,
            message=model.message,
            data=model.data or {},
            source_entity_id=model.source_entity_id,
            is_read=bool(model.is_read),
            created_at=ensure_app_timezone(model.created_at),
            expires_at=ensure_app_timezone(model.expires_at),
            action_url=model.action_url,
            action_label=model.action_label,
        )


__all__ = ["NotificationRepository"]
