"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationRepository
from .role_repository import RoleRepository
from .scheduled_email_repository import ScheduledEmailRepository
from .user_repository import UserRepository

__all__ = [
    "NotificationRepository",
    "RoleRepository",
    "ScheduledEmailRepository",
    "UserRepository",
]
