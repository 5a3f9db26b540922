"""Repository implementations for infrastructure layer."""

from .booking_repository import BookingRepository
from .notification_repository import NotificationRepository
from .prospect_repository import ProspectActionLogRepository, ProspectRepository
from .task_repository import ProjectRepository, TaskRepository
from .user_repository import UserRepository

__all__ = [
    "BookingRepository",
    "NotificationRepository",
    "ProjectRepository",
    "ProspectActionLogRepository",
    "ProspectRepository",
    "TaskRepository",
    "UserRepository",
]
