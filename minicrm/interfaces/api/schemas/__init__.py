from .auth import Token
from .email import (
    EmailTemplateRead,
    PaginationRead,
    ScheduledEmailCreate,
    ScheduledEmailPage,
    ScheduledEmailRead,
)
from .notification import MarkAllReadResponse, NotificationRead
from .user import RoleRead, UserCreate, UserRead

__all__ = [
    "EmailTemplateRead",
    "MarkAllReadResponse",
    "NotificationRead",
    "PaginationRead",
    "RoleRead",
    "ScheduledEmailCreate",
    "ScheduledEmailPage",
    "ScheduledEmailRead",
    "Token",
    "UserCreate",
    "UserRead",
]
