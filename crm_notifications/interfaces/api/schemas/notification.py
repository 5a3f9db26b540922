"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from crm_notifications.domain.entities import NotificationPriority, NotificationType


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    user_id: int
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime
    expires_at: datetime | None = None
    action_url: str | None = None
    action_label: str | None = None


class NotificationCreate(BaseModel):
    """Manual notification addressed to the authenticated user."""

    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    data: dict[str, Any] | None = None
    expires_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )
    action_url: str | None = Field(
        default=None, validation_alias=AliasChoices("action_url", "actionUrl")
    )
    action_label: str | None = Field(
        default=None, validation_alias=AliasChoices("action_label", "actionLabel")
    )


class NotificationUpdate(BaseModel):
    is_read: bool = Field(..., validation_alias=AliasChoices("is_read", "isRead"))


class MarkAllReadResponse(BaseModel):
    success: bool = True
    updated: int


class DeleteResponse(BaseModel):
    success: bool = True


class TestNotificationResponse(BaseModel):
    success: bool = True
    message: str
    notification: NotificationRead


class RuleRunRead(BaseModel):
    rule: str
    status: str
    created: int
    skipped: int
    failed: int
    error: str | None = None


class TriggerRunResponse(BaseModel):
    """Outcome of one run of every notification rule."""

    success: bool
    message: str
    ran_at: datetime
    created: int
    skipped: int
    failed: int
    rules: list[RuleRunRead]


__all__ = [
    "DeleteResponse",
    "MarkAllReadResponse",
    "NotificationCreate",
    "NotificationRead",
    "NotificationUpdate",
    "RuleRunRead",
    "TestNotificationResponse",
    "TriggerRunResponse",
]
