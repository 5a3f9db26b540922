"""ORM models used by the application infrastructure."""

from .booking import BookingModel, BookingNotificationModel
from .notification import NotificationModel
from .prospect import ProspectActionLogModel, ProspectModel
from .task import ProjectModel, TaskModel
from .user import UserModel

__all__ = [
    "BookingModel",
    "BookingNotificationModel",
    "NotificationModel",
    "ProjectModel",
    "ProspectActionLogModel",
    "ProspectModel",
    "TaskModel",
    "UserModel",
]
