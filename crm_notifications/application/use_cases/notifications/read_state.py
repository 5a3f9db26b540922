"""Owner-scoped reads and read-state changes on notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from crm_notifications.application.errors import (
    NotificationAccessError,
    NotificationNotFoundError,
    StoreError,
)
from crm_notifications.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationSort,
)
from crm_notifications.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)

_ACCESS_DENIED = "Vous n'avez pas accès à cette notification"
_NOT_FOUND = "Notification introuvable"


def _ensure_same_user(user_id: int, acting_user_id: int | None) -> None:
    if acting_user_id is not None and acting_user_id != user_id:
        raise NotificationAccessError(_ACCESS_DENIED)


def _get_owned(repository: NotificationRepository, notification_id: int, user_id: int) -> Notification:
    try:
        notification = repository.get(notification_id)
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de lire la notification", details=str(exc)) from exc
    if notification is None:
        raise NotificationNotFoundError(_NOT_FOUND)
    if notification.user_id != user_id:
        raise NotificationAccessError(_ACCESS_DENIED)
    return notification


def _has_unread_sibling(repository: NotificationRepository, notification: Notification) -> bool:
    if notification.source_entity_id is None:
        return False
    try:
        sibling = repository.find_unread_for_source(
            user_id=notification.user_id,
            type=notification.type,
            source_entity_id=notification.source_entity_id,
        )
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de lire la notification", details=str(exc)) from exc
    return sibling is not None and sibling.id != notification.id


def list_notifications(
    session: Session,
    user_id: int,
    *,
    filters: NotificationFilters | None = None,
    sort: NotificationSort | None = None,
    limit: int | None = 50,
    offset: int = 0,
    acting_user_id: int | None = None,
) -> Sequence[Notification]:
    """Return the notifications owned by ``user_id``."""

    _ensure_same_user(user_id, acting_user_id)
    try:
        return NotificationRepository(session).list_for_user(
            user_id, filters=filters, sort=sort, limit=limit, offset=offset
        )
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de récupérer les notifications", details=str(exc)) from exc


def mark_read(
    session: Session,
    notification_id: int,
    user_id: int,
    *,
    is_read: bool = True,
) -> Notification:
    """Set the read flag of one notification owned by ``user_id``."""

    repository = NotificationRepository(session)
    current = _get_owned(repository, notification_id, user_id)
    if not is_read and current.is_read and _has_unread_sibling(repository, current):
        logger.info(
            "Notification %s stays read: a newer unread notification covers %s",
            notification_id,
            current.source_entity_id,
        )
        return current
    try:
        updated = repository.set_read(notification_id, user_id=user_id, is_read=is_read)
    except IntegrityError:
        logger.info(
            "Notification %s stays read: an unread notification for %s was stored meanwhile",
            notification_id,
            current.source_entity_id,
        )
        return current
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de mettre à jour la notification", details=str(exc)) from exc
    if updated is None:  # deleted between the two statements
        raise NotificationNotFoundError(_NOT_FOUND)
    return updated


def mark_all_read(
    session: Session, user_id: int, *, acting_user_id: int | None = None
) -> int:
    """Mark every unread notification of ``user_id`` as read; return the count."""

    _ensure_same_user(user_id, acting_user_id)
    try:
        return NotificationRepository(session).mark_all_as_read(user_id=user_id)
    except SQLAlchemyError as exc:
        raise StoreError(
            "Impossible de marquer les notifications comme lues", details=str(exc)
        ) from exc


def delete_notification(session: Session, notification_id: int, user_id: int) -> None:
    repository = NotificationRepository(session)
    _get_owned(repository, notification_id, user_id)
    try:
        repository.delete(notification_id, user_id=user_id)
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de supprimer la notification", details=str(exc)) from exc


__all__ = [
    "delete_notification",
    "list_notifications",
    "mark_all_read",
    "mark_read",
]
