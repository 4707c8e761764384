"""Persist one notification per recipient and push them concurrently.

Persistence happens first and in a single transaction, so the stored batch is
complete before any realtime delivery starts. Pushes are best effort: each
one reports its own outcome and none of them can fail the fan-out.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from uuid import uuid4

import anyio
from anyio import to_thread
from sqlalchemy.orm import Session

from minicrm.domain.entities import Notification, NotificationEvent
from minicrm.infrastructure.notifications import notification_publisher
from minicrm.infrastructure.repositories import NotificationRepository
from minicrm.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

Publisher = Callable[[Notification], Awaitable[int]]


@dataclass(frozen=True)
class PushOutcome:
    recipient_id: int
    notification_id: int | None
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class FanoutResult:
    """Persisted notifications of one event and the push outcome of each."""

    batch_id: str | None
    notifications: list[Notification] = field(default_factory=list)
    outcomes: list[PushOutcome] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)


def _unique_recipients(recipient_ids: Iterable[int | None]) -> list[int]:
    seen: set[int] = set()
    recipients: list[int] = []
    for recipient_id in recipient_ids:
        if recipient_id is None or recipient_id in seen:
            continue
        seen.add(recipient_id)
        recipients.append(recipient_id)
    return recipients


async def _push(
    publish: Publisher,
    notification: Notification,
    limiter: anyio.CapacityLimiter,
    timeout: float,
) -> PushOutcome:
    async with limiter:
        try:
            with anyio.fail_after(timeout):
                await publish(notification)
        except TimeoutError:
            error = f"Push timed out after {timeout:g} seconds"
        except Exception as exc:  # noqa: BLE001 - pushes are best effort
            error = str(exc) or type(exc).__name__
        else:
            return PushOutcome(notification.recipient_id, notification.id, True)

    logger.warning(
        "Realtime push of notification %s to user %s failed: %s",
        notification.id,
        notification.recipient_id,
        error,
    )
    return PushOutcome(notification.recipient_id, notification.id, False, error)


async def fan_out_notification(
    session: Session,
    event: NotificationEvent,
    recipient_ids: Iterable[int | None],
    *,
    publish: Publisher = notification_publisher,
    concurrency: int = 50,
    timeout: float = 30.0,
) -> FanoutResult:
    """Deliver ``event`` to every recipient in ``recipient_ids``.

    Duplicate recipients receive a single notification. An empty recipient set
    is a no-op that stores nothing.
    """

    recipients = _unique_recipients(recipient_ids)
    if not recipients:
        return FanoutResult(batch_id=None)

    batch_id = uuid4().hex
    created_at = now_in_app_timezone()
    pending = [
        Notification(
            id=None,
            recipient_id=recipient_id,
            batch_id=batch_id,
            event_type=event.event_type,
            title=event.title,
            message=event.message,
            payload=dict(event.payload),
            link=event.link,
            created_at=created_at,
        )
        for recipient_id in recipients
    ]
    notifications = await to_thread.run_sync(
        NotificationRepository(session).create_many, pending
    )

    limiter = anyio.CapacityLimiter(max(1, concurrency))
    outcomes: list[PushOutcome | None] = [None] * len(notifications)

    async def _push_into(index: int, notification: Notification) -> None:
        outcomes[index] = await _push(publish, notification, limiter, timeout)

    async with anyio.create_task_group() as task_group:
        for index, notification in enumerate(notifications):
            task_group.start_soon(_push_into, index, notification)

    result = FanoutResult(
        batch_id=batch_id,
        notifications=notifications,
        outcomes=[outcome for outcome in outcomes if outcome is not None],
    )
    logger.info(
        "Notification batch %s (%s): %s stored, %s pushed, %s push failures",
        batch_id,
        event.event_type,
        len(notifications),
        result.success_count,
        result.failure_count,
    )
    return result


__all__ = ["FanoutResult", "PushOutcome", "fan_out_notification"]
