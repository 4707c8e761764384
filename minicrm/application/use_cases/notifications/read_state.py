"""Use cases for reading notifications and tracking their read state."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from minicrm.domain.entities import Notification
from minicrm.domain.exceptions import NotificationNotFoundError
from minicrm.infrastructure.repositories import NotificationRepository


def list_notifications(
    session: Session, *, user_id: int, limit: int = 50, unread_only: bool = False
) -> Sequence[Notification]:
    """Return the latest notifications of ``user_id``, newest first."""

    repository = NotificationRepository(session)
    if unread_only:
        return repository.list_unread_for_user(user_id, limit=limit)
    return repository.list_for_user(user_id, limit=limit)


def mark_notification_read(
    session: Session, notification_id: int, *, user_id: int
) -> Notification:
    """Mark one notification as read.

    Notifications of other users are reported as missing. Reading an already
    read notification keeps its original ``read_at``.
    """

    repository = NotificationRepository(session)
    notification = repository.get(notification_id)
    if notification is None or notification.recipient_id != user_id:
        raise NotificationNotFoundError(notification_id)
    if not notification.is_read:
        repository.mark_as_read([notification_id], user_id=user_id)
        notification = repository.get(notification_id) or notification
    return notification


def mark_notifications_read(
    session: Session, notification_ids: Iterable[int], *, user_id: int
) -> int:
    return NotificationRepository(session).mark_as_read(notification_ids, user_id=user_id)


def mark_all_notifications_read(session: Session, *, user_id: int) -> int:
    """Mark every unread notification of ``user_id`` as read and return how many changed."""

    return NotificationRepository(session).mark_all_as_read(user_id=user_id)


__all__ = [
    "list_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
    "mark_notifications_read",
]
