"""Fixed presentation of each notification type.

Every type maps to one priority, a title, a message pattern and an action
link. Patterns are rendered with the ``context`` of a trigger event; dates
are shown in ``dd/mm/yyyy`` form.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from crm_notifications.domain.entities import NotificationPriority, NotificationType


def _project_url(context: Mapping[str, Any]) -> str:
    project_id = context.get("project_id")
    return f"/dashboard/projects/{project_id}" if project_id else "/dashboard/projects"


def _item_url(context: Mapping[str, Any]) -> str:
    item_type = str(context.get("item_kind", "")).lower()
    if item_type == "task":
        return f"/dashboard/tasks/{context['item_id']}"
    if item_type == "project":
        return f"/dashboard/projects/{context['item_id']}"
    return "/dashboard"


@dataclass(frozen=True)
class NotificationTemplate:
    priority: NotificationPriority
    title: str
    message: str
    action_label: str
    action_url: Callable[[Mapping[str, Any]], str]

    def render_message(self, context: Mapping[str, Any]) -> str:
        return self.message.format(**_displayable(context))


TEMPLATES: dict[NotificationType, NotificationTemplate] = {
    NotificationType.TASK_ASSIGNED: NotificationTemplate(
        priority=NotificationPriority.HIGH,
        title="Nouvelle tâche assignée",
        message='{assigner_name} vous a assigné la tâche "{task_title}"',
        action_label="Voir la tâche",
        action_url=_project_url,
    ),
    NotificationType.TASK_DUE_SOON: NotificationTemplate(
        priority=NotificationPriority.HIGH,
        title="Tâche à échéance proche",
        message='La tâche "{task_title}" arrive à échéance le {due_date}',
        action_label="Voir la tâche",
        action_url=_project_url,
    ),
    NotificationType.TASK_OVERDUE: NotificationTemplate(
        priority=NotificationPriority.URGENT,
        title="Tâche en retard",
        message='La tâche "{task_title}" est en retard',
        action_label="Voir la tâche",
        action_url=_project_url,
    ),
    NotificationType.FORGOTTEN_TASK: NotificationTemplate(
        priority=NotificationPriority.MEDIUM,
        title="Tâche oubliée",
        message='La tâche "{task_title}" n\'a pas été mise à jour depuis {days_inactive} jours',
        action_label="Voir la tâche",
        action_url=_project_url,
    ),
    NotificationType.PROJECT_ASSIGNED: NotificationTemplate(
        priority=NotificationPriority.HIGH,
        title="Nouveau projet assigné",
        message='{assigner_name} vous a assigné au projet "{project_name}"',
        action_label="Voir le projet",
        action_url=_project_url,
    ),
    NotificationType.DEADLINE_APPROACHING: NotificationTemplate(
        priority=NotificationPriority.HIGH,
        title="Échéance proche",
        message='{item_label} "{item_title}" arrive à échéance le {deadline}',
        action_label="Voir les détails",
        action_url=_item_url,
    ),
    NotificationType.DEADLINE_PASSED: NotificationTemplate(
        priority=NotificationPriority.URGENT,
        title="Échéance dépassée",
        message='{item_label} "{item_title}" a dépassé son échéance',
        action_label="Voir les détails",
        action_url=_item_url,
    ),
    NotificationType.PROSPECT_LIST_ASSIGNED: NotificationTemplate(
        priority=NotificationPriority.HIGH,
        title="Nouvelle liste assignée",
        message='Vous avez été assigné à la liste "{list_name}"',
        action_label="Voir la liste",
        action_url=lambda context: f"/dashboard/prospects?listId={context['list_id']}",
    ),
    NotificationType.PROSPECT_RAPPEL_DUE: NotificationTemplate(
        priority=NotificationPriority.HIGH,
        title="Rappel prospect à venir",
        message='Rappel prévu pour le prospect "{prospect_name}" le {rappel_date}',
        action_label="Voir le prospect",
        action_url=lambda context: f"/dashboard/prospects?listId={context['list_id']}",
    ),
    NotificationType.PROSPECT_RAPPEL_OVERDUE: NotificationTemplate(
        priority=NotificationPriority.URGENT,
        title="Rappel prospect en retard",
        message='Le rappel du prospect "{prospect_name}" prévu le {rappel_date} est dépassé',
        action_label="Voir le prospect",
        action_url=lambda context: f"/dashboard/prospects?listId={context['list_id']}",
    ),
}


def get_template(notification_type: NotificationType) -> NotificationTemplate:
    return TEMPLATES[NotificationType(notification_type)]


def _displayable(context: Mapping[str, Any]) -> dict[str, Any]:
    rendered: dict[str, Any] = {}
    for key, value in context.items():
        if isinstance(value, (datetime, date)):
            rendered[key] = value.strftime("%d/%m/%Y")
        else:
            rendered[key] = value
    return rendered


__all__ = ["NotificationTemplate", "TEMPLATES", "get_template"]
