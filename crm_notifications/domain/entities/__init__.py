"""Domain entities exposed by the application."""

from .booking import (
    BOOKING_REMINDER_ERROR,
    BOOKING_REMINDER_SUCCESS,
    BOOKING_STATUS_CANCELLED,
    BOOKING_STATUS_CONFIRMED,
    Booking,
    BookingNotification,
    BookingReminderResult,
)
from .notification import (
    Notification,
    NotificationFilters,
    NotificationPriority,
    NotificationSort,
    NotificationSortField,
    NotificationType,
    SortDirection,
)
from .prospect import (
    ACTION_EDIT,
    ACTION_REDO,
    ACTION_REVERT,
    ACTION_UNDO,
    ActionHistory,
    Prospect,
    ProspectAction,
)
from .task import (
    PROJECT_STATUS_ACTIVE,
    PROJECT_STATUS_COMPLETED,
    TASK_STATUS_DOING,
    TASK_STATUS_DONE,
    TASK_STATUS_TODO,
    Project,
    Task,
)
from .trigger_event import TriggerEvent
from .user import User

__all__ = [
    "ACTION_EDIT",
    "ACTION_REDO",
    "ACTION_REVERT",
    "ACTION_UNDO",
    "ActionHistory",
    "Booking",
    "BookingNotification",
    "BookingReminderResult",
    "BOOKING_REMINDER_ERROR",
    "BOOKING_REMINDER_SUCCESS",
    "BOOKING_STATUS_CANCELLED",
    "BOOKING_STATUS_CONFIRMED",
    "Notification",
    "NotificationFilters",
    "NotificationPriority",
    "NotificationSort",
    "NotificationSortField",
    "NotificationType",
    "Project",
    "PROJECT_STATUS_ACTIVE",
    "PROJECT_STATUS_COMPLETED",
    "Prospect",
    "ProspectAction",
    "SortDirection",
    "Task",
    "TASK_STATUS_DOING",
    "TASK_STATUS_DONE",
    "TASK_STATUS_TODO",
    "TriggerEvent",
    "User",
]
