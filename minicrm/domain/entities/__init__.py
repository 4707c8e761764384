"""Domain entities exposed by the application."""

from .notification import (
    NOTIFICATION_USER_CREATED,
    Notification,
    NotificationEvent,
)
from .role import DEFAULT_ROLES, ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_SUPER_ADMIN, Role
from .scheduled_email import (
    DEFAULT_EMAIL_TEMPLATE,
    EMAIL_STATUSES,
    EMAIL_STATUS_CANCELLED,
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_PENDING,
    EMAIL_STATUS_SENT,
    ScheduledEmail,
)
from .user import User

__all__ = [
    "DEFAULT_EMAIL_TEMPLATE",
    "DEFAULT_ROLES",
    "EMAIL_STATUSES",
    "EMAIL_STATUS_CANCELLED",
    "EMAIL_STATUS_FAILED",
    "EMAIL_STATUS_PENDING",
    "EMAIL_STATUS_SENT",
    "NOTIFICATION_USER_CREATED",
    "Notification",
    "NotificationEvent",
    "ROLE_EMPLOYEE",
    "ROLE_MANAGER",
    "ROLE_SUPER_ADMIN",
    "Role",
    "ScheduledEmail",
    "User",
]
