"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable

from anyio import to_thread
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from minicrm.application.use_cases.notifications import (
    list_notifications as list_notifications_uc,
    mark_all_notifications_read,
    mark_notification_read,
    mark_notifications_read,
)
from minicrm.config import get_settings
from minicrm.domain.entities import Notification, User
from minicrm.domain.exceptions import NotificationNotFoundError
from minicrm.infrastructure.database import get_db
from minicrm.infrastructure.notifications import notification_manager, serialize_notification
from minicrm.interfaces.api.dependencies import (
    get_current_active_user,
    get_session_factory,
    resolve_current_user,
)
from minicrm.interfaces.api.schemas import MarkAllReadResponse, NotificationRead

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        user_id=notification.recipient_id,
        batch_id=notification.batch_id,
        event_type=notification.event_type,
        title=notification.title,
        message=notification.message,
        payload=notification.payload or {},
        link=notification.link,
        created_at=notification.created_at,
        read_at=notification.read_at,
        is_read=notification.is_read,
    )


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated user."""

    notifications = list_notifications_uc(
        db,
        user_id=current_user.id,
        limit=get_settings().notification_list_limit,
        unread_only=unread_only,
    )
    return [_notification_to_schema(notification) for notification in notifications]


@router.patch("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MarkAllReadResponse:
    """Mark every unread notification of the caller as read."""

    return MarkAllReadResponse(updated=mark_all_notifications_read(db, user_id=current_user.id))


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    try:
        notification = mark_notification_read(db, notification_id, user_id=current_user.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _notification_to_schema(notification)


def _authenticate_websocket(
    token: str, session_factory: Callable[[], Session]
) -> tuple[User, list[Notification]]:
    with session_factory() as session:
        user = resolve_current_user(token, session)
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
        return user, list(
            list_notifications_uc(
                session,
                user_id=user.id,
                limit=get_settings().notification_list_limit,
                unread_only=True,
            )
        )


def _acknowledge(session_factory: Callable[[], Session], ids: list[int], user_id: int) -> int:
    with session_factory() as session:
        return mark_notifications_read(session, ids, user_id=user_id)


@router.websocket("/ws")
async def notifications_websocket(
    websocket: WebSocket,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        user, pending = await to_thread.run_sync(_authenticate_websocket, token, session_factory)
    except HTTPException:
        await websocket.close(code=1008)
        return
    except SQLAlchemyError:
        logger.exception("Unable to load the notification websocket session")
        await websocket.close(code=1011)
        return

    await notification_manager.connect(user.id, websocket)
    try:
        if pending:
            await websocket.send_json(
                {"type": "init", "data": [serialize_notification(n) for n in pending]}
            )
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue
            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif message_type == "ack":
                ids = [item for item in message.get("ids") or [] if isinstance(item, int)]
                if ids:
                    try:
                        await to_thread.run_sync(_acknowledge, session_factory, ids, user.id)
                    except SQLAlchemyError:
                        logger.exception("Failed to acknowledge notifications for user %s", user.id)
    except WebSocketDisconnect:
        logger.debug("Notification websocket closed for user %s", user.id)
    finally:
        notification_manager.disconnect(user.id, websocket)
