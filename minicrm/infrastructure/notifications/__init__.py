"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, RealtimeDeliveryError, notification_manager
from .publisher import (
    NOTIFICATION_MESSAGE_TYPE,
    NotificationPublisher,
    notification_publisher,
    serialize_notification,
)

__all__ = [
    "NOTIFICATION_MESSAGE_TYPE",
    "NotificationConnectionManager",
    "NotificationPublisher",
    "RealtimeDeliveryError",
    "notification_manager",
    "notification_publisher",
    "serialize_notification",
]
