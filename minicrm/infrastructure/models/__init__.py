"""ORM models used by the application infrastructure."""

from .role import RoleModel
from .user import UserModel
from .scheduled_email import ScheduledEmailModel
from .notification import NotificationModel

__all__ = [
    "RoleModel",
    "UserModel",
    "ScheduledEmailModel",
    "NotificationModel",
]
