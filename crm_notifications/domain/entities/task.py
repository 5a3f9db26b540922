"""Domain entities for tasks and projects read by the reminder rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

TASK_STATUS_TODO = "todo"
TASK_STATUS_DOING = "doing"
TASK_STATUS_DONE = "done"

PROJECT_STATUS_ACTIVE = "active"
PROJECT_STATUS_COMPLETED = "completed"


@dataclass
class Task:
    id: int | None
    title: str
    status: str
    assigned_to: int | None
    project_id: int | None
    due_date: datetime | None
    status_changed_at: datetime | None
    created_at: datetime | None

    def is_completed(self) -> bool:
        return self.status == TASK_STATUS_DONE

    def last_activity_at(self) -> datetime | None:
        """Return when the task last changed status (or was created)."""

        return self.status_changed_at or self.created_at


@dataclass
class Project:
    id: int | None
    name: str
    status: str
    assigned_to: int | None
    deadline: datetime | None

    def is_completed(self) -> bool:
        return self.status == PROJECT_STATUS_COMPLETED


__all__ = [
    "Project",
    "PROJECT_STATUS_ACTIVE",
    "PROJECT_STATUS_COMPLETED",
    "Task",
    "TASK_STATUS_DOING",
    "TASK_STATUS_DONE",
    "TASK_STATUS_TODO",
]
