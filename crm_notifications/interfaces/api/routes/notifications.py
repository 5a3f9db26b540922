"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import json
import logging
from datetime import datetime

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from crm_notifications.application.errors import ApplicationError
from crm_notifications.application.use_cases.notifications import (
    create_manual_notification,
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
    run_notification_checks,
)
from crm_notifications.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationPriority,
    NotificationSort,
    NotificationSortField,
    NotificationType,
    SortDirection,
    User,
)
from crm_notifications.infrastructure.database import SessionLocal, get_db
from crm_notifications.infrastructure.notifications import (
    notification_manager,
    serialize_notification,
)
from crm_notifications.interfaces.api.dependencies import (
    get_current_active_user,
    require_cron_secret,
    resolve_current_user,
)
from crm_notifications.interfaces.api.errors import error_response, to_http_exception
from crm_notifications.interfaces.api.schemas import (
    DeleteResponse,
    MarkAllReadResponse,
    NotificationCreate,
    NotificationRead,
    NotificationUpdate,
    RuleRunRead,
    TestNotificationResponse,
    TriggerRunResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        user_id=notification.user_id,
        type=notification.type,
        priority=notification.priority,
        title=notification.title,
        message=notification.message,
        data=notification.data or {},
        is_read=notification.is_read,
        created_at=notification.created_at,
        expires_at=notification.expires_at,
        action_url=notification.action_url,
        action_label=notification.action_label,
    )


@router.get("", response_model=list[NotificationRead])
def get_notifications(
    type: list[NotificationType] | None = Query(default=None),
    priority: list[NotificationPriority] | None = Query(default=None),
    is_read: bool | None = Query(default=None),
    created_from: datetime | None = Query(default=None),
    created_to: datetime | None = Query(default=None),
    sort_by: NotificationSortField = Query(default=NotificationSortField.CREATED_AT),
    sort_order: SortDirection = Query(default=SortDirection.DESC),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    """Return the notifications of the authenticated user."""

    filters = NotificationFilters(
        types=tuple(type or ()),
        priorities=tuple(priority or ()),
        is_read=is_read,
        created_from=created_from,
        created_to=created_to,
    )
    try:
        notifications = list_notifications(
            db,
            current_user.id,
            filters=filters,
            sort=NotificationSort(field=sort_by, direction=sort_order),
            limit=limit,
            offset=offset,
        )
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return [_notification_to_schema(notification) for notification in notifications]


@router.post("", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification_endpoint(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    try:
        notification = create_manual_notification(
            db,
            user_id=current_user.id,
            type=payload.type,
            title=payload.title,
            message=payload.message,
            priority=payload.priority,
            data=payload.data,
            expires_at=payload.expires_at,
            action_url=payload.action_url,
            action_label=payload.action_label,
        )
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return _notification_to_schema(notification)


@router.post("/test", response_model=TestNotificationResponse)
def create_test_notification(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> TestNotificationResponse:
    """Send a harmless notification to the caller to check delivery."""

    try:
        notification = create_manual_notification(
            db,
            user_id=current_user.id,
            type=NotificationType.TASK_ASSIGNED,
            title="Notification de test",
            message="Ceci est une notification de test pour vérifier que le système fonctionne.",
            priority=NotificationPriority.MEDIUM,
            data={"test": True},
            action_url="/dashboard",
            action_label="Aller au tableau de bord",
        )
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return TestNotificationResponse(
        message="Notification de test créée",
        notification=_notification_to_schema(notification),
    )


@router.post("/check-triggers", response_model=TriggerRunResponse)
def check_triggers(
    _: None = Depends(require_cron_secret),
    db: Session = Depends(get_db),
):
    """Run every notification rule once; meant to be called by a cron job."""

    summary = run_notification_checks(db)
    if summary.total_failure:
        errors = "; ".join(f"{rule.rule}: {rule.error}" for rule in summary.rules)
        return error_response(
            "Échec de la vérification des notifications",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=errors,
        )
    return TriggerRunResponse(
        success=True,
        message="Vérification des notifications terminée",
        ran_at=summary.ran_at,
        created=summary.created,
        skipped=summary.skipped,
        failed=summary.failed,
        rules=[
            RuleRunRead(
                rule=result.rule,
                status=result.status,
                created=result.created,
                skipped=result.skipped,
                failed=result.failed,
                error=result.error,
            )
            for result in summary.rules
        ],
    )


@router.patch("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MarkAllReadResponse:
    try:
        updated = mark_all_read(db, current_user.id)
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return MarkAllReadResponse(updated=updated)


@router.patch("/{notification_id}", response_model=NotificationRead)
def update_notification(
    notification_id: int,
    payload: NotificationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    try:
        notification = mark_read(db, notification_id, current_user.id, is_read=payload.is_read)
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return _notification_to_schema(notification)


@router.delete("/{notification_id}", response_model=DeleteResponse)
def remove_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DeleteResponse:
    try:
        delete_notification(db, notification_id, current_user.id)
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return DeleteResponse()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Stream new notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Utilisateur inactif")
        pending = list_notifications(
            session, user.id, filters=NotificationFilters(is_read=False), limit=None
        )
    except HTTPException:
        await websocket.close(code=1008)
        return
    except ApplicationError:
        logger.exception("Could not load pending notifications for websocket client")
        await websocket.close(code=1011)
        return
    finally:
        session.close()

    await notification_manager.connect(user.id, websocket)
    try:
        if pending:
            await websocket.send_json(
                {"type": "init", "data": [serialize_notification(n) for n in pending]}
            )
        while True:
            try:
                message = json.loads(await websocket.receive_text())
            except ValueError:
                continue
            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif message_type == "ack":
                _acknowledge(user.id, message.get("ids"))
    except WebSocketDisconnect:
        pass
    finally:
        notification_manager.disconnect(user.id, websocket)


def _acknowledge(user_id: int, ids: object) -> None:
    if not isinstance(ids, list):
        return
    session = SessionLocal()
    try:
        for notification_id in ids:
            if not isinstance(notification_id, int):
                continue
            try:
                mark_read(session, notification_id, user_id)
            except ApplicationError as exc:
                logger.info("Ignoring ack for notification %s: %s", notification_id, exc.message)
    finally:
        session.close()
