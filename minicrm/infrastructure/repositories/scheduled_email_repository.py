"""Persistence helpers for scheduled email entities.

Status changes are written as conditional ``UPDATE`` statements that include
the expected current status in their ``WHERE`` clause. Two concurrent writers
can therefore never both move the same record out of a status; the loser sees
``False`` and must treat the record as owned by someone else.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from minicrm.domain.entities import (
    EMAIL_STATUS_CANCELLED,
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_PENDING,
    EMAIL_STATUS_SENT,
    ScheduledEmail,
)
from minicrm.infrastructure.models import ScheduledEmailModel
from minicrm.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

_MAX_ERROR_LENGTH = 500


class ScheduledEmailRepository:
    """Provide CRUD operations and guarded transitions for :class:`ScheduledEmail`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, email_id: int) -> ScheduledEmail | None:
        model = self.session.get(ScheduledEmailModel, email_id)
        return self._to_entity(model) if model else None

    def create(self, email: ScheduledEmail) -> ScheduledEmail:
        model = ScheduledEmailModel()
        self._apply_entity_to_model(model, email)
        model.created_at = ensure_app_naive_datetime(
            email.created_at or now_in_app_timezone()
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_due(self, now: datetime, *, limit: int = 100) -> Sequence[ScheduledEmail]:
        """Return pending emails that are immediate or whose schedule has arrived."""

        query = (
            self.session.query(ScheduledEmailModel)
            .filter(ScheduledEmailModel.status == EMAIL_STATUS_PENDING)
            .filter(
                or_(
                    ScheduledEmailModel.send_now.is_(True),
                    ScheduledEmailModel.scheduled_for <= ensure_app_naive_datetime(now),
                )
            )
            .order_by(ScheduledEmailModel.created_at.asc(), ScheduledEmailModel.id.asc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def list(
        self,
        *,
        creator_id: int | None = None,
        company_id: int | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[ScheduledEmail], int]:
        """Return one page of emails and the total matching count.

        When ``creator_id`` and/or ``company_id`` are given, emails matching any
        of them are returned; without both the listing is unrestricted.
        """

        query = self.session.query(ScheduledEmailModel)
        ownership = []
        if creator_id is not None:
            ownership.append(ScheduledEmailModel.created_by == creator_id)
        if company_id is not None:
            ownership.append(ScheduledEmailModel.company_id == company_id)
        if ownership:
            query = query.filter(or_(*ownership))
        if status:
            query = query.filter(ScheduledEmailModel.status == status)

        total = query.count()
        models = (
            query.order_by(
                ScheduledEmailModel.created_at.desc(), ScheduledEmailModel.id.desc()
            )
            .offset(skip)
            .limit(limit)
            .all()
        )
        return [self._to_entity(model) for model in models], total

    def mark_sent(self, email_id: int, *, sent_at: datetime) -> bool:
        return self._transition(
            email_id,
            expected_status=EMAIL_STATUS_PENDING,
            values={
                ScheduledEmailModel.status: EMAIL_STATUS_SENT,
                ScheduledEmailModel.sent_at: ensure_app_naive_datetime(sent_at),
                ScheduledEmailModel.failed_at: None,
                ScheduledEmailModel.last_error: None,
            },
        )

    def mark_failed(self, email_id: int, *, failed_at: datetime, error: str) -> bool:
        diagnostic = (error or "Unknown delivery error")[:_MAX_ERROR_LENGTH]
        return self._transition(
            email_id,
            expected_status=EMAIL_STATUS_PENDING,
            values={
                ScheduledEmailModel.status: EMAIL_STATUS_FAILED,
                ScheduledEmailModel.failed_at: ensure_app_naive_datetime(failed_at),
                ScheduledEmailModel.last_error: diagnostic,
            },
        )

    def cancel(self, email_id: int) -> bool:
        return self._transition(
            email_id,
            expected_status=EMAIL_STATUS_PENDING,
            values={ScheduledEmailModel.status: EMAIL_STATUS_CANCELLED},
        )

    def requeue(self, email_id: int) -> bool:
        """Move a failed email back to ``pending`` so the next sweep sends it."""

        return self._transition(
            email_id,
            expected_status=EMAIL_STATUS_FAILED,
            values={
                ScheduledEmailModel.status: EMAIL_STATUS_PENDING,
                ScheduledEmailModel.send_now: True,
                ScheduledEmailModel.failed_at: None,
                ScheduledEmailModel.last_error: None,
            },
        )

    def _transition(
        self, email_id: int, *, expected_status: str, values: dict
    ) -> bool:
        values = {
            **values,
            ScheduledEmailModel.updated_at: ensure_app_naive_datetime(
                now_in_app_timezone()
            ),
        }
        updated = (
            self.session.query(ScheduledEmailModel)
            .filter(
                ScheduledEmailModel.id == email_id,
                ScheduledEmailModel.status == expected_status,
            )
            .update(values, synchronize_session=False)
        )
        self.session.commit()
        return updated == 1

    @staticmethod
    def _apply_entity_to_model(model: ScheduledEmailModel, email: ScheduledEmail) -> None:
        model.from_name = email.from_name
        model.from_email = email.from_email
        model.to_name = email.to_name
        model.to_email = email.to_email
        model.subject = email.subject
        model.message = email.message
        model.template = email.template
        model.send_now = email.send_now
        model.scheduled_for = ensure_app_naive_datetime(email.scheduled_for)
        model.status = email.status
        model.sent_at = ensure_app_naive_datetime(email.sent_at)
        model.failed_at = ensure_app_naive_datetime(email.failed_at)
        model.last_error = email.last_error
        model.created_by = email.created_by
        model.company_id = email.company_id

    @staticmethod
    def _to_entity(model: ScheduledEmailModel) -> ScheduledEmail:
        return ScheduledEmail(
            id=model.id,
            from_name=model.from_name,
            from_email=model.from_email,
            to_name=model.to_name,
            to_email=model.to_email,
            subject=model.subject,
            message=model.message,
            template=model.template,
            send_now=model.send_now,
            scheduled_for=ensure_app_timezone(model.scheduled_for),
            status=model.status,
            created_by=model.created_by,
            company_id=model.company_id,
            sent_at=ensure_app_timezone(model.sent_at),
            failed_at=ensure_app_timezone(model.failed_at),
            last_error=model.last_error,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["ScheduledEmailRepository"]
