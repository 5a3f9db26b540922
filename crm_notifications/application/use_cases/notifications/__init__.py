"""Notification engine: rules, factory, scheduler and read-state."""

from .events import (
    notify_project_assigned,
    notify_prospect_list_assigned,
    notify_task_assigned,
)
from .factory import (
    NotificationCreation,
    build_notification,
    create_manual_notification,
    create_notification,
)
from .read_state import (
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
)
from .rules import RuleConfig, RuleEvaluator, build_rule_evaluators
from .scheduler import RuleRunResult, TriggerRunSummary, run_notification_checks

__all__ = [
    "NotificationCreation",
    "RuleConfig",
    "RuleEvaluator",
    "RuleRunResult",
    "TriggerRunSummary",
    "build_notification",
    "build_rule_evaluators",
    "create_manual_notification",
    "create_notification",
    "delete_notification",
    "list_notifications",
    "mark_all_read",
    "mark_read",
    "notify_project_assigned",
    "notify_prospect_list_assigned",
    "notify_task_assigned",
    "run_notification_checks",
]
