"""Tests for notification fan-out, read state and the new user event."""

from __future__ import annotations

import anyio
import pytest

from minicrm.application.use_cases.notifications import (
    build_user_created_event,
    fan_out_notification,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    notify_users_of_new_user,
)
from minicrm.domain.entities import NotificationEvent
from minicrm.domain.exceptions import NotificationNotFoundError
from minicrm.infrastructure.repositories import NotificationRepository


class FakePublisher:
    def __init__(self, *, fail_for=(), delay_for=(), delay: float = 0.0) -> None:
        self.fail_for = set(fail_for)
        self.delay_for = set(delay_for)
        self.delay = delay
        self.published = []

    async def __call__(self, notification) -> int:
        if notification.recipient_id in self.delay_for:
            await anyio.sleep(self.delay)
        if notification.recipient_id in self.fail_for:
            raise ConnectionError("socket closed")
        self.published.append(notification)
        return 1


EVENT = NotificationEvent(
    event_type="user_created",
    title="New User Created",
    message="Someone joined",
    payload={"user": {"id": 1}},
    link="/users/1",
)


@pytest.mark.anyio
async def test_fan_out_persists_every_recipient_despite_push_failures(session, make_user):
    recipients = [make_user().id for _ in range(10)]
    publisher = FakePublisher(fail_for=set(recipients[:3]))

    result = await fan_out_notification(session, EVENT, recipients, publish=publisher)

    assert result.batch_id
    assert len(result.notifications) == 10
    assert result.success_count == 7
    assert result.failure_count == 3
    assert {outcome.recipient_id for outcome in result.outcomes if not outcome.success} == set(
        recipients[:3]
    )
    assert all(outcome.error == "socket closed" for outcome in result.outcomes if not outcome.success)
    assert NotificationRepository(session).count_batch(result.batch_id) == 10
    assert {n.recipient_id for n in result.notifications} == set(recipients)
    assert all(not n.is_read and n.link == "/users/1" for n in result.notifications)


@pytest.mark.anyio
async def test_fan_out_to_nobody_stores_nothing(session):
    publisher = FakePublisher()

    result = await fan_out_notification(session, EVENT, [], publish=publisher)

    assert result.batch_id is None
    assert result.notifications == []
    assert result.outcomes == []
    assert publisher.published == []


@pytest.mark.anyio
async def test_fan_out_deduplicates_recipients(session, make_user):
    user = make_user()

    result = await fan_out_notification(
        session, EVENT, [user.id, user.id, None], publish=FakePublisher()
    )

    assert len(result.notifications) == 1


@pytest.mark.anyio
async def test_slow_push_times_out_without_failing_the_fan_out(session, make_user):
    slow, fast = make_user().id, make_user().id
    publisher = FakePublisher(delay_for={slow}, delay=2.0)

    result = await fan_out_notification(
        session, EVENT, [slow, fast], publish=publisher, timeout=0.05
    )

    outcomes = {outcome.recipient_id: outcome for outcome in result.outcomes}
    assert outcomes[fast].success is True
    assert outcomes[slow].success is False
    assert "timed out" in outcomes[slow].error


@pytest.mark.anyio
async def test_new_user_event_targets_active_managers_and_employees(
    session, make_user, super_admin
):
    manager = make_user("manager")
    employee = make_user("employee")
    make_user("employee", is_active=False)
    new_user = make_user("employee", first_name="Nora", last_name="New")
    publisher = FakePublisher()

    result = await notify_users_of_new_user(session, new_user, publish=publisher)

    assert {n.recipient_id for n in result.notifications} == {manager.id, employee.id}
    notification = result.notifications[0]
    assert notification.event_type == "user_created"
    assert notification.title == "New User Created"
    assert notification.message == "Nora New has joined as employee"
    assert notification.payload["user"]["id"] == new_user.id
    assert notification.link == f"/users/{new_user.id}"
    assert super_admin.id not in {n.recipient_id for n in result.notifications}


def test_user_created_event_payload(make_user):
    user = make_user("manager", first_name="Mia", last_name="Stone")

    event = build_user_created_event(user)

    assert event.payload == {
        "user": {
            "id": user.id,
            "first_name": "Mia",
            "last_name": "Stone",
            "role": "manager",
            "avatar": None,
        }
    }


@pytest.mark.anyio
async def test_read_state_is_monotonic(session, make_user):
    user = make_user()
    other = make_user()
    result = await fan_out_notification(session, EVENT, [user.id], publish=FakePublisher())
    notification_id = result.notifications[0].id

    first = mark_notification_read(session, notification_id, user_id=user.id)
    second = mark_notification_read(session, notification_id, user_id=user.id)

    assert first.read_at is not None
    assert second.read_at == first.read_at
    with pytest.raises(NotificationNotFoundError):
        mark_notification_read(session, notification_id, user_id=other.id)


@pytest.mark.anyio
async def test_mark_all_read_is_a_no_op_when_nothing_is_unread(session, make_user):
    user = make_user()
    await fan_out_notification(session, EVENT, [user.id], publish=FakePublisher())
    await fan_out_notification(session, EVENT, [user.id], publish=FakePublisher())

    assert mark_all_notifications_read(session, user_id=user.id) == 2
    assert mark_all_notifications_read(session, user_id=user.id) == 0
    assert list_notifications(session, user_id=user.id, unread_only=True) == []
    assert len(list_notifications(session, user_id=user.id)) == 2
