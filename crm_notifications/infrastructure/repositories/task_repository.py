"""Read access to tasks and projects for the reminder rules."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from crm_notifications.domain.entities import (
    PROJECT_STATUS_COMPLETED,
    TASK_STATUS_DONE,
    Project,
    Task,
)
from crm_notifications.infrastructure.models import ProjectModel, TaskModel
from crm_notifications.utils import ensure_app_naive_datetime, ensure_app_timezone


class TaskRepository:
    """Query open tasks by due date and by last status change."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_open_due_between(self, start: datetime, end: datetime) -> Sequence[Task]:
        """Return open tasks with ``start <= due_date < end``."""

        query = (
            self._open_tasks()
            .filter(TaskModel.due_date >= ensure_app_naive_datetime(start))
            .filter(TaskModel.due_date < ensure_app_naive_datetime(end))
            .order_by(TaskModel.due_date.asc(), TaskModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_open_due_before(self, moment: datetime) -> Sequence[Task]:
        query = (
            self._open_tasks()
            .filter(TaskModel.due_date < ensure_app_naive_datetime(moment))
            .order_by(TaskModel.due_date.asc(), TaskModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_open_inactive_since(self, moment: datetime) -> Sequence[Task]:
        """Return open tasks whose last status change is older than ``moment``."""

        cutoff = ensure_app_naive_datetime(moment)
        query = (
            self._open_tasks()
            .filter(
                or_(
                    TaskModel.status_changed_at < cutoff,
                    (TaskModel.status_changed_at.is_(None)) & (TaskModel.created_at < cutoff),
                )
            )
            .order_by(TaskModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def _open_tasks(self):
        return self.session.query(TaskModel).filter(TaskModel.status != TASK_STATUS_DONE)

    @staticmethod
    def _to_entity(model: TaskModel) -> Task:
        return Task(
            id=model.id,
            title=model.title,
            status=model.status,
            assigned_to=model.assigned_to,
            project_id=model.project_id,
            due_date=ensure_app_timezone(model.due_date),
            status_changed_at=ensure_app_timezone(model.status_changed_at),
            created_at=ensure_app_timezone(model.created_at),
        )


class ProjectRepository:
    """Query active projects by deadline."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active_with_deadline_between(
        self, start: datetime, end: datetime
    ) -> Sequence[Project]:
        query = (
            self._active_projects()
            .filter(ProjectModel.deadline >= ensure_app_naive_datetime(start))
            .filter(ProjectModel.deadline < ensure_app_naive_datetime(end))
            .order_by(ProjectModel.deadline.asc(), ProjectModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_active_with_deadline_before(self, moment: datetime) -> Sequence[Project]:
        query = (
            self._active_projects()
            .filter(ProjectModel.deadline < ensure_app_naive_datetime(moment))
            .order_by(ProjectModel.deadline.asc(), ProjectModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def _active_projects(self):
        return (
            self.session.query(ProjectModel)
            .filter(ProjectModel.deadline.is_not(None))
            .filter(ProjectModel.status != PROJECT_STATUS_COMPLETED)
        )

    @staticmethod
    def _to_entity(model: ProjectModel) -> Project:
        return Project(
            id=model.id,
            name=model.name,
            status=model.status,
            assigned_to=model.assigned_to,
            deadline=ensure_app_timezone(model.deadline),
        )


__all__ = ["ProjectRepository", "TaskRepository"]
