"""Use cases for user notifications."""

from .events import build_user_created_event, notify_users_of_new_user
from .fanout import FanoutResult, PushOutcome, fan_out_notification
from .read_state import (
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    mark_notifications_read,
)

__all__ = [
    "FanoutResult",
    "PushOutcome",
    "build_user_created_event",
    "fan_out_notification",
    "list_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
    "mark_notifications_read",
    "notify_users_of_new_user",
]
