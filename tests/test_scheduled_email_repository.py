"""Tests for guarded status transitions and due selection of scheduled emails."""

from __future__ import annotations

from datetime import timedelta

from minicrm.domain.entities import (
    EMAIL_STATUS_CANCELLED,
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_PENDING,
    EMAIL_STATUS_SENT,
)
from minicrm.infrastructure.repositories import ScheduledEmailRepository
from minicrm.utils import now_in_app_timezone


def test_list_due_selects_immediate_and_arrived_pending_emails(session, manager, make_email):
    now = now_in_app_timezone()
    immediate = make_email(manager, to_email="now@example.com")
    arrived = make_email(
        manager, to_email="past@example.com", send_now=False, scheduled_for=now - timedelta(minutes=5)
    )
    make_email(
        manager, to_email="future@example.com", send_now=False, scheduled_for=now + timedelta(hours=1)
    )
    make_email(manager, to_email="cancelled@example.com", status=EMAIL_STATUS_CANCELLED)
    make_email(manager, to_email="failed@example.com", status=EMAIL_STATUS_FAILED)

    due = ScheduledEmailRepository(session).list_due(now)

    assert [email.id for email in due] == [immediate.id, arrived.id]


def test_list_due_honours_the_limit(session, manager, make_email):
    for index in range(4):
        make_email(manager, to_email=f"c{index}@example.com")

    due = ScheduledEmailRepository(session).list_due(now_in_app_timezone(), limit=3)

    assert len(due) == 3


def test_mark_sent_only_applies_to_pending_emails(session, manager, make_email):
    repository = ScheduledEmailRepository(session)
    pending = make_email(manager)
    cancelled = make_email(manager, status=EMAIL_STATUS_CANCELLED)
    now = now_in_app_timezone()

    assert repository.mark_sent(pending.id, sent_at=now) is True
    assert repository.mark_sent(pending.id, sent_at=now) is False
    assert repository.mark_sent(cancelled.id, sent_at=now) is False

    sent = repository.get(pending.id)
    assert sent.status == EMAIL_STATUS_SENT
    assert sent.sent_at is not None
    assert repository.get(cancelled.id).status == EMAIL_STATUS_CANCELLED


def test_mark_failed_records_a_truncated_diagnostic(session, manager, make_email):
    repository = ScheduledEmailRepository(session)
    email = make_email(manager)

    assert repository.mark_failed(email.id, failed_at=now_in_app_timezone(), error="x" * 800)

    failed = repository.get(email.id)
    assert failed.status == EMAIL_STATUS_FAILED
    assert failed.failed_at is not None
    assert len(failed.last_error) == 500


def test_cancel_is_rejected_outside_pending(session, manager, make_email):
    repository = ScheduledEmailRepository(session)
    email = make_email(manager)

    assert repository.cancel(email.id) is True
    assert repository.cancel(email.id) is False
    assert repository.get(email.id).status == EMAIL_STATUS_CANCELLED


def test_requeue_moves_failed_back_to_pending_for_immediate_send(session, manager, make_email):
    repository = ScheduledEmailRepository(session)
    future = now_in_app_timezone() + timedelta(days=1)
    email = make_email(manager, send_now=False, scheduled_for=future)
    repository.mark_failed(email.id, failed_at=now_in_app_timezone(), error="boom")

    assert repository.requeue(email.id) is True
    assert repository.requeue(email.id) is False

    retried = repository.get(email.id)
    assert retried.status == EMAIL_STATUS_PENDING
    assert retried.send_now is True
    assert retried.last_error is None
    assert retried.failed_at is None
    assert [due.id for due in repository.list_due(now_in_app_timezone())] == [email.id]


def test_list_filters_by_creator_or_company(session, make_user, make_email):
    manager_a = make_user("manager", company_id=1)
    manager_b = make_user("manager", company_id=2)
    own = make_email(manager_a)
    same_company = make_email(manager_b, company_id=1)
    other = make_email(manager_b)

    items, total = ScheduledEmailRepository(session).list(
        creator_id=manager_a.id, company_id=manager_a.company_id
    )

    assert total == 2
    assert {email.id for email in items} == {own.id, same_company.id}
    assert other.id not in {email.id for email in items}


def test_list_filters_by_status_and_paginates(session, manager, make_email):
    repository = ScheduledEmailRepository(session)
    for index in range(3):
        make_email(manager, to_email=f"p{index}@example.com")
    make_email(manager, status=EMAIL_STATUS_CANCELLED)

    first_page, total = repository.list(status=EMAIL_STATUS_PENDING, skip=0, limit=2)
    second_page, _ = repository.list(status=EMAIL_STATUS_PENDING, skip=2, limit=2)

    assert total == 3
    assert len(first_page) == 2
    assert len(second_page) == 1
