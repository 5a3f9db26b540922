"""Build notifications from trigger events and persist them once.

The dedup contract: while an unread notification exists for a given
``(user_id, type, source_entity_id)``, no second one is written. The lookup
runs first; the partial unique index on ``notification`` catches the race
between two overlapping runs, and that conflict is reported as skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from crm_notifications.application.errors import StoreError, ValidationError
from crm_notifications.domain.entities import (
    Notification,
    NotificationPriority,
    NotificationType,
    TriggerEvent,
)
from crm_notifications.infrastructure.email import send_notification_email
from crm_notifications.infrastructure.notifications import dispatch_notification
from crm_notifications.infrastructure.repositories import NotificationRepository, UserRepository
from crm_notifications.utils import now_in_app_timezone

from .templates import get_template

logger = logging.getLogger(__name__)

_EMAILED_PRIORITIES = frozenset({NotificationPriority.HIGH, NotificationPriority.URGENT})


@dataclass(frozen=True)
class NotificationCreation:
    """Outcome of :func:`create_notification`."""

    notification: Notification | None
    skipped_reason: str | None = None

    @property
    def created(self) -> bool:
        return self.notification is not None

    @property
    def skipped(self) -> bool:
        return self.notification is None


def build_notification(event: TriggerEvent, *, now: datetime | None = None) -> Notification:
    """Render the notification body for ``event`` without persisting it."""

    template = get_template(event.type)
    try:
        message = template.render_message(event.context)
        action_url = template.action_url(event.context)
    except KeyError as exc:
        raise ValidationError(
            f"Champ manquant dans le contexte de la notification : {exc.args[0]}"
        ) from exc

    return Notification(
        id=None,
        user_id=event.user_id,
        type=event.type,
        priority=template.priority,
        title=template.title,
        message=message,
        data={**_json_payload(event.context), "source_entity_id": event.source_entity_id},
        source_entity_id=event.source_entity_id,
        is_read=False,
        created_at=now or now_in_app_timezone(),
        action_url=action_url,
        action_label=template.action_label,
    )


def create_notification(
    session: Session,
    event: TriggerEvent,
    *,
    now: datetime | None = None,
) -> NotificationCreation:
    """Persist the notification for ``event`` unless an unread one exists."""

    repository = NotificationRepository(session)
    try:
        existing = repository.find_unread_for_source(
            user_id=event.user_id,
            type=event.type,
            source_entity_id=event.source_entity_id,
        )
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de vérifier les notifications existantes", details=str(exc)) from exc

    if existing is not None:
        logger.debug(
            "Skipping %s for user %s and entity %s: unread notification %s exists",
            event.type.value,
            event.user_id,
            event.source_entity_id,
            existing.id,
        )
        return NotificationCreation(notification=None, skipped_reason="duplicate")

    notification = build_notification(event, now=now)
    try:
        saved = repository.create(notification)
    except IntegrityError:
        logger.info(
            "Concurrent %s notification for user %s and entity %s already stored",
            event.type.value,
            event.user_id,
            event.source_entity_id,
        )
        return NotificationCreation(notification=None, skipped_reason="conflict")
    except SQLAlchemyError as exc:
        raise StoreError("Impossible d'enregistrer la notification", details=str(exc)) from exc

    deliver_notification(session, saved)
    return NotificationCreation(notification=saved)


def create_manual_notification(
    session: Session,
    *,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    data: Mapping[str, Any] | None = None,
    expires_at: datetime | None = None,
    action_url: str | None = None,
    action_label: str | None = None,
) -> Notification:
    """Persist a notification composed by the caller (no dedup)."""

    for field_name, value in (("type", type), ("title", title), ("message", message)):
        if not value or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"Le champ '{field_name}' est obligatoire")

    try:
        notification_type = NotificationType(type)
        notification_priority = NotificationPriority(priority)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    notification = Notification(
        id=None,
        user_id=user_id,
        type=notification_type,
        priority=notification_priority,
        title=title.strip(),
        message=message.strip(),
        data=_json_payload(data or {}),
        created_at=now_in_app_timezone(),
        expires_at=expires_at,
        action_url=action_url,
        action_label=action_label,
    )
    try:
        saved = NotificationRepository(session).create(notification)
    except SQLAlchemyError as exc:
        raise StoreError("Impossible d'enregistrer la notification", details=str(exc)) from exc

    deliver_notification(session, saved)
    return saved


def deliver_notification(session: Session, notification: Notification) -> None:
    """Push ``notification`` to open websockets and email it when urgent.

    Delivery problems are logged; the notification stays stored either way.
    """

    dispatch_notification(notification)

    if notification.priority not in _EMAILED_PRIORITIES:
        return
    owner = UserRepository(session).get(notification.user_id)
    if owner is None or not owner.email:
        return
    if not send_notification_email(notification, owner.email):
        logger.warning(
            "Notification %s could not be emailed to user %s", notification.id, owner.id
        )


def _json_payload(values: Mapping[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, (datetime, date)):
            payload[key] = value.isoformat()
        else:
            payload[key] = value
    return payload


__all__ = [
    "NotificationCreation",
    "build_notification",
    "create_manual_notification",
    "create_notification",
    "deliver_notification",
]
