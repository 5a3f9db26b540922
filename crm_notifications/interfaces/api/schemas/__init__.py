from .auth import Token
from .booking import (
    BookingReminderResultRead,
    BookingReminderRunResponse,
    UpcomingBookingRead,
    UpcomingRemindersResponse,
)
from .notification import (
    DeleteResponse,
    MarkAllReadResponse,
    NotificationCreate,
    NotificationRead,
    NotificationUpdate,
    RuleRunRead,
    TestNotificationResponse,
    TriggerRunResponse,
)
from .prospect import (
    ActionHistoryRead,
    ProspectActionRead,
    ProspectRead,
    ProspectUpdate,
    RevertRequest,
    RevertResponse,
)

__all__ = [
    "ActionHistoryRead",
    "BookingReminderResultRead",
    "BookingReminderRunResponse",
    "DeleteResponse",
    "MarkAllReadResponse",
    "NotificationCreate",
    "NotificationRead",
    "NotificationUpdate",
    "ProspectActionRead",
    "ProspectRead",
    "ProspectUpdate",
    "RevertRequest",
    "RevertResponse",
    "RuleRunRead",
    "TestNotificationResponse",
    "Token",
    "TriggerRunResponse",
    "UpcomingBookingRead",
    "UpcomingRemindersResponse",
]
