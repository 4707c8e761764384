"""Notifications generated by domain events."""

from __future__ import annotations

import logging

from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from minicrm.config import get_settings
from minicrm.domain.entities import (
    NOTIFICATION_USER_CREATED,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    NotificationEvent,
    User,
)
from minicrm.infrastructure.notifications import notification_publisher
from minicrm.infrastructure.repositories import UserRepository

from .fanout import FanoutResult, Publisher, fan_out_notification

logger = logging.getLogger(__name__)

USER_CREATED_RECIPIENT_ROLES = (ROLE_MANAGER, ROLE_EMPLOYEE)


def build_user_created_event(user: User) -> NotificationEvent:
    return NotificationEvent(
        event_type=NOTIFICATION_USER_CREATED,
        title="New User Created",
        message=f"{user.full_name} has joined as {user.role.alias}",
        payload={
            "user": {
                "id": user.id,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "role": user.role.alias,
                "avatar": user.avatar,
            }
        },
        link=f"/users/{user.id}",
    )


async def notify_users_of_new_user(
    session: Session,
    new_user: User,
    *,
    publish: Publisher = notification_publisher,
) -> FanoutResult:
    """Tell every active manager and employee that ``new_user`` joined.

    The user has already been created when this runs, so storage errors are
    logged and reported as an empty result instead of being raised.
    """

    settings = get_settings()
    repository = UserRepository(session)
    try:
        recipients = await to_thread.run_sync(
            lambda: repository.list_active_ids_by_role_aliases(
                USER_CREATED_RECIPIENT_ROLES, exclude_ids=[new_user.id]
            )
        )
        return await fan_out_notification(
            session,
            build_user_created_event(new_user),
            recipients,
            publish=publish,
            concurrency=settings.notification_push_concurrency,
            timeout=settings.transport_timeout_seconds,
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not store notifications for new user %s", new_user.id)
        return FanoutResult(batch_id=None)


__all__ = [
    "USER_CREATED_RECIPIENT_ROLES",
    "build_user_created_event",
    "notify_users_of_new_user",
]
