"""Notifications emitted directly by user actions (assignments)."""

from __future__ import annotations

from sqlalchemy.orm import Session

from crm_notifications.domain.entities import NotificationType, TriggerEvent

from .factory import NotificationCreation, create_notification


def notify_task_assigned(
    session: Session,
    *,
    task_id: int,
    task_title: str,
    assignee_id: int,
    assigner_name: str,
    project_id: int | None = None,
) -> NotificationCreation:
    """Tell ``assignee_id`` that a task was assigned to them."""

    return create_notification(
        session,
        TriggerEvent(
            user_id=assignee_id,
            type=NotificationType.TASK_ASSIGNED,
            source_entity_id=str(task_id),
            context={
                "task_id": task_id,
                "task_title": task_title,
                "assigner_name": assigner_name,
                "project_id": project_id,
            },
        ),
    )


def notify_project_assigned(
    session: Session,
    *,
    project_id: int,
    project_name: str,
    assignee_id: int,
    assigner_name: str,
) -> NotificationCreation:
    return create_notification(
        session,
        TriggerEvent(
            user_id=assignee_id,
            type=NotificationType.PROJECT_ASSIGNED,
            source_entity_id=f"project:{project_id}",
            context={
                "project_id": project_id,
                "project_name": project_name,
                "assigner_name": assigner_name,
            },
        ),
    )


def notify_prospect_list_assigned(
    session: Session,
    *,
    list_id: int,
    list_name: str | None,
    user_id: int,
    assigned_by: int,
    can_edit: bool = False,
    can_delete: bool = False,
) -> NotificationCreation:
    """Tell ``user_id`` they were added to a prospect list."""

    return create_notification(
        session,
        TriggerEvent(
            user_id=user_id,
            type=NotificationType.PROSPECT_LIST_ASSIGNED,
            source_entity_id=f"list:{list_id}",
            context={
                "list_id": list_id,
                "list_name": list_name or "Prospects",
                "assigned_by": assigned_by,
                "can_edit": can_edit,
                "can_delete": can_delete,
            },
        ),
    )


__all__ = [
    "notify_project_assigned",
    "notify_prospect_list_assigned",
    "notify_task_assigned",
]
