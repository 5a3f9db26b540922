"""Rule evaluators: detect records that should produce a notification.

Each evaluator reads the store and returns the :class:`TriggerEvent` objects
matching its time window for a given ``now``. Evaluators never write; they
are independent of each other and may run in any order.

Windows are half-open: a record is *due soon* when
``now <= due < now + window`` and *overdue* when ``due < now``. A due date
of exactly ``now + window`` is therefore not yet due soon.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from crm_notifications.config import Settings, get_settings
from crm_notifications.domain.entities import NotificationType, TriggerEvent
from crm_notifications.infrastructure.repositories import (
    ProjectRepository,
    ProspectRepository,
    TaskRepository,
)
from crm_notifications.utils import ensure_app_timezone, whole_days_between

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleConfig:
    """Windows used by the evaluators and the booking reminder job."""

    task_due_soon_window: timedelta = timedelta(hours=24)
    deadline_lead_window: timedelta = timedelta(hours=24)
    prospect_rappel_window: timedelta = timedelta(hours=24)
    forgotten_task_after: timedelta = timedelta(days=7)
    booking_reminder_lead: timedelta = timedelta(hours=1)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RuleConfig":
        settings = settings or get_settings()
        return cls(
            task_due_soon_window=timedelta(hours=settings.task_due_soon_hours),
            deadline_lead_window=timedelta(hours=settings.deadline_lead_hours),
            prospect_rappel_window=timedelta(hours=settings.prospect_rappel_lead_hours),
            forgotten_task_after=timedelta(days=settings.forgotten_task_days),
            booking_reminder_lead=timedelta(minutes=settings.booking_reminder_lead_minutes),
        )


class RuleEvaluator:
    """Base class for the notification rules."""

    name: str = ""
    notification_type: NotificationType

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        raise NotImplementedError

    def _skip(self, entity: str, entity_id: object, reason: str) -> None:
        logger.debug("Rule %s skipped %s %s: %s", self.name, entity, entity_id, reason)


@dataclass(frozen=True)
class TaskDueSoonRule(RuleEvaluator):
    window: timedelta = timedelta(hours=24)

    name = "task_due_soon"
    notification_type = NotificationType.TASK_DUE_SOON

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        now = ensure_app_timezone(now)
        events: list[TriggerEvent] = []
        for task in TaskRepository(session).list_open_due_between(now, now + self.window):
            if task.assigned_to is None:
                self._skip("task", task.id, "no assignee")
                continue
            events.append(
                TriggerEvent(
                    user_id=task.assigned_to,
                    type=self.notification_type,
                    source_entity_id=str(task.id),
                    context={
                        "task_id": task.id,
                        "task_title": task.title,
                        "project_id": task.project_id,
                        "due_date": task.due_date,
                    },
                )
            )
        return events


@dataclass(frozen=True)
class TaskOverdueRule(RuleEvaluator):
    name = "task_overdue"
    notification_type = NotificationType.TASK_OVERDUE

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        events: list[TriggerEvent] = []
        for task in TaskRepository(session).list_open_due_before(ensure_app_timezone(now)):
            if task.assigned_to is None:
                self._skip("task", task.id, "no assignee")
                continue
            events.append(
                TriggerEvent(
                    user_id=task.assigned_to,
                    type=self.notification_type,
                    source_entity_id=str(task.id),
                    context={
                        "task_id": task.id,
                        "task_title": task.title,
                        "project_id": task.project_id,
                        "due_date": task.due_date,
                    },
                )
            )
        return events


@dataclass(frozen=True)
class ForgottenTaskRule(RuleEvaluator):
    """Open tasks whose status has not changed for ``stale_after``.

    Inactivity is measured from the last status change, or from creation
    for a task whose status never changed.
    """

    stale_after: timedelta = timedelta(days=7)

    name = "forgotten_task"
    notification_type = NotificationType.FORGOTTEN_TASK

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        now = ensure_app_timezone(now)
        events: list[TriggerEvent] = []
        for task in TaskRepository(session).list_open_inactive_since(now - self.stale_after):
            last_activity = task.last_activity_at()
            if task.assigned_to is None or last_activity is None:
                self._skip("task", task.id, "no assignee or activity date")
                continue
            events.append(
                TriggerEvent(
                    user_id=task.assigned_to,
                    type=self.notification_type,
                    source_entity_id=str(task.id),
                    context={
                        "task_id": task.id,
                        "task_title": task.title,
                        "project_id": task.project_id,
                        "days_inactive": whole_days_between(last_activity, now),
                    },
                )
            )
        return events


def _prospect_context(prospect) -> dict[str, object]:
    return {
        "prospect_id": prospect.id,
        "prospect_name": prospect.name,
        "list_id": prospect.list_id,
        "rappel_date": prospect.rappel_date,
    }


@dataclass(frozen=True)
class ProspectRappelDueRule(RuleEvaluator):
    window: timedelta = timedelta(hours=24)

    name = "prospect_rappel_due"
    notification_type = NotificationType.PROSPECT_RAPPEL_DUE

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        now = ensure_app_timezone(now)
        events: list[TriggerEvent] = []
        for prospect in ProspectRepository(session).list_with_rappel_between(now, now + self.window):
            if prospect.assigned_to is None:
                self._skip("prospect", prospect.id, "no assignee")
                continue
            events.append(
                TriggerEvent(
                    user_id=prospect.assigned_to,
                    type=self.notification_type,
                    source_entity_id=str(prospect.id),
                    context=_prospect_context(prospect),
                )
            )
        return events


@dataclass(frozen=True)
class ProspectRappelOverdueRule(RuleEvaluator):
    name = "prospect_rappel_overdue"
    notification_type = NotificationType.PROSPECT_RAPPEL_OVERDUE

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        events: list[TriggerEvent] = []
        for prospect in ProspectRepository(session).list_with_rappel_before(ensure_app_timezone(now)):
            if prospect.assigned_to is None:
                self._skip("prospect", prospect.id, "no assignee")
                continue
            events.append(
                TriggerEvent(
                    user_id=prospect.assigned_to,
                    type=self.notification_type,
                    source_entity_id=str(prospect.id),
                    context=_prospect_context(prospect),
                )
            )
        return events


def _project_context(project) -> dict[str, object]:
    return {
        "item_id": project.id,
        "item_title": project.name,
        "item_kind": "project",
        "item_label": "Projet",
        "deadline": project.deadline,
    }


@dataclass(frozen=True)
class DeadlineApproachingRule(RuleEvaluator):
    lead: timedelta = timedelta(hours=24)

    name = "deadline_approaching"
    notification_type = NotificationType.DEADLINE_APPROACHING

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        now = ensure_app_timezone(now)
        projects = ProjectRepository(session).list_active_with_deadline_between(now, now + self.lead)
        events: list[TriggerEvent] = []
        for project in projects:
            if project.assigned_to is None:
                self._skip("project", project.id, "no assignee")
                continue
            events.append(
                TriggerEvent(
                    user_id=project.assigned_to,
                    type=self.notification_type,
                    source_entity_id=f"project:{project.id}",
                    context=_project_context(project),
                )
            )
        return events


@dataclass(frozen=True)
class DeadlinePassedRule(RuleEvaluator):
    name = "deadline_passed"
    notification_type = NotificationType.DEADLINE_PASSED

    def evaluate(self, session: Session, now: datetime) -> list[TriggerEvent]:
        projects = ProjectRepository(session).list_active_with_deadline_before(ensure_app_timezone(now))
        events: list[TriggerEvent] = []
        for project in projects:
            if project.assigned_to is None:
                self._skip("project", project.id, "no assignee")
                continue
            events.append(
                TriggerEvent(
                    user_id=project.assigned_to,
                    type=self.notification_type,
                    source_entity_id=f"project:{project.id}",
                    context=_project_context(project),
                )
            )
        return events


def build_rule_evaluators(config: RuleConfig | None = None) -> list[RuleEvaluator]:
    """Return one evaluator per scheduled rule, configured from ``config``."""

    config = config or RuleConfig()
    return [
        TaskDueSoonRule(window=config.task_due_soon_window),
        TaskOverdueRule(),
        ForgottenTaskRule(stale_after=config.forgotten_task_after),
        ProspectRappelDueRule(window=config.prospect_rappel_window),
        ProspectRappelOverdueRule(),
        DeadlineApproachingRule(lead=config.deadline_lead_window),
        DeadlinePassedRule(),
    ]


__all__ = [
    "DeadlineApproachingRule",
    "DeadlinePassedRule",
    "ForgottenTaskRule",
    "ProspectRappelDueRule",
    "ProspectRappelOverdueRule",
    "RuleConfig",
    "RuleEvaluator",
    "TaskDueSoonRule",
    "TaskOverdueRule",
    "build_rule_evaluators",
]
