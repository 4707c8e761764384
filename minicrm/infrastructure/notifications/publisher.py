"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

from typing import Any

from minicrm.domain.entities import Notification

from .manager import NotificationConnectionManager, notification_manager

NOTIFICATION_MESSAGE_TYPE = "notification"


class NotificationPublisher:
    """Serialize notifications and push them to their recipient's channel."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    async def __call__(self, notification: Notification) -> int:
        """Publish ``notification`` and return the number of reached connections."""

        message = {"type": NOTIFICATION_MESSAGE_TYPE, "data": serialize_notification(notification)}
        return await self._manager.send_to_user(notification.recipient_id, message)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "user_id": notification.recipient_id,
        "batch_id": notification.batch_id,
        "type": notification.event_type,
        "title": notification.title,
        "message": notification.message,
        "payload": notification.payload or {},
        "link": notification.link,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "is_read": notification.is_read,
    }


notification_publisher = NotificationPublisher(notification_manager)


__all__ = [
    "NOTIFICATION_MESSAGE_TYPE",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
