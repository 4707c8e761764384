"""Domain entities for per-recipient notifications and fan-out events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_USER_CREATED = "user_created"


@dataclass
class Notification:
    """Information message delivered to exactly one recipient.

    Notifications are created in batches, one row per recipient, and every row
    of a batch shares the ``batch_id`` of the event that produced it.
    """

    id: int | None
    recipient_id: int
    batch_id: str
    event_type: str
    title: str
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    link: str | None = None
    created_at: datetime | None = None
    read_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


@dataclass(frozen=True)
class NotificationEvent:
    """Describe one source event to be fanned out to many recipients."""

    event_type: str
    title: str
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    link: str | None = None


__all__ = [
    "NOTIFICATION_USER_CREATED",
    "Notification",
    "NotificationEvent",
]
