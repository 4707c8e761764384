"""Use case for scheduling an email."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from minicrm.domain.entities import (
    DEFAULT_EMAIL_TEMPLATE,
    EMAIL_STATUS_PENDING,
    ScheduledEmail,
    User,
)
from minicrm.infrastructure.repositories import ScheduledEmailRepository
from minicrm.utils import now_in_app_timezone

from .validators import ensure_future_schedule, ensure_valid_address, require_text


def create_scheduled_email(
    session: Session,
    *,
    sender: User,
    from_name: str,
    to_name: str,
    to_email: str,
    subject: str,
    message: str,
    template: str | None = None,
    send_now: bool = True,
    scheduled_for: datetime | None = None,
    now: datetime | None = None,
) -> ScheduledEmail:
    """Validate and persist a new ``pending`` email created by ``sender``.

    The reply address is always the sender's own address, and emails created
    by managers are scoped to the manager's company.
    """

    current_time = now or now_in_app_timezone()
    schedule = None if send_now else ensure_future_schedule(scheduled_for, now=current_time)

    email = ScheduledEmail(
        id=None,
        from_name=require_text(from_name, "from_name"),
        from_email=sender.email,
        to_name=require_text(to_name, "to_name"),
        to_email=ensure_valid_address(to_email, "to_email"),
        subject=require_text(subject, "subject"),
        message=require_text(message, "message"),
        template=(template or "").strip() or DEFAULT_EMAIL_TEMPLATE,
        send_now=send_now,
        scheduled_for=schedule,
        status=EMAIL_STATUS_PENDING,
        created_by=sender.id,
        company_id=sender.company_id if sender.is_manager() else None,
        created_at=current_time,
    )
    return ScheduledEmailRepository(session).create(email)
