"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Kinds of notification the CRM emits."""

    TASK_ASSIGNED = "task_assigned"
    TASK_DUE_SOON = "task_due_soon"
    TASK_OVERDUE = "task_overdue"
    FORGOTTEN_TASK = "forgotten_task"
    PROJECT_ASSIGNED = "project_assigned"
    DEADLINE_APPROACHING = "deadline_approaching"
    DEADLINE_PASSED = "deadline_passed"
    PROSPECT_LIST_ASSIGNED = "prospect_list_assigned"
    PROSPECT_RAPPEL_DUE = "prospect_rappel_due"
    PROSPECT_RAPPEL_OVERDUE = "prospect_rappel_overdue"


class NotificationPriority(str, Enum):
    """Urgency of a notification, from least to most urgent."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS = {
    NotificationPriority.LOW: 0,
    NotificationPriority.MEDIUM: 1,
    NotificationPriority.HIGH: 2,
    NotificationPriority.URGENT: 3,
}


@dataclass
class Notification:
    """Information message delivered to a specific user.

    Only ``is_read`` changes after creation; everything else is fixed.
    ``source_entity_id`` identifies the record that triggered the
    notification and is also embedded in ``data``.
    """

    id: int | None
    user_id: int
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    data: dict[str, Any] = field(default_factory=dict)
    source_entity_id: str | None = None
    is_read: bool = False
    created_at: datetime | None = None
    expires_at: datetime | None = None
    action_url: str | None = None
    action_label: str | None = None

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` once ``expires_at`` is in the past."""

        return self.expires_at is not None and self.expires_at <= now


@dataclass(frozen=True)
class NotificationFilters:
    """Optional criteria applied when listing notifications."""

    types: tuple[NotificationType, ...] = ()
    priorities: tuple[NotificationPriority, ...] = ()
    is_read: bool | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None


class NotificationSortField(str, Enum):
    CREATED_AT = "createdAt"
    PRIORITY = "priority"
    TYPE = "type"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class NotificationSort:
    """Ordering applied when listing notifications."""

    field: NotificationSortField = NotificationSortField.CREATED_AT
    direction: SortDirection = SortDirection.DESC


__all__ = [
    "Notification",
    "NotificationFilters",
    "NotificationPriority",
    "NotificationSort",
    "NotificationSortField",
    "NotificationType",
    "SortDirection",
]
