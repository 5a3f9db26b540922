"""Domain entity describing a condition detected by a rule evaluator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .notification import NotificationType


@dataclass(frozen=True)
class TriggerEvent:
    """An (entity, condition) pair that may produce a notification.

    ``context`` carries the values used to render the notification text
    (titles, dates, related identifiers).
    """

    user_id: int
    type: NotificationType
    source_entity_id: str
    context: dict[str, Any] = field(default_factory=dict)


__all__ = ["TriggerEvent"]
