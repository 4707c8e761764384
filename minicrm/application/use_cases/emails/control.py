"""Guarded state transitions requested by operators: cancel and retry.

Both operations only check the record's status. Deciding *who* may call them
is done by :mod:`minicrm.application.policies` at the API boundary.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from minicrm.domain.entities import ScheduledEmail
from minicrm.domain.exceptions import EmailNotFoundError, EmailTransitionError
from minicrm.infrastructure.repositories import ScheduledEmailRepository

logger = logging.getLogger(__name__)


def get_scheduled_email(session: Session, email_id: int) -> ScheduledEmail:
    """Return the requested email or raise :class:`EmailNotFoundError`."""

    email = ScheduledEmailRepository(session).get(email_id)
    if email is None:
        raise EmailNotFoundError(email_id)
    return email


def cancel_scheduled_email(session: Session, email_id: int) -> ScheduledEmail:
    """Move a ``pending`` email to ``cancelled``.

    Any other status is rejected without touching the record, including an
    email that is already cancelled.
    """

    repository = ScheduledEmailRepository(session)
    email = get_scheduled_email(session, email_id)
    if not email.can_cancel() or not repository.cancel(email_id):
        current = repository.get(email_id) or email
        raise EmailTransitionError(email_id, "cancel", current.status)

    logger.info("Scheduled email %s cancelled", email_id)
    return get_scheduled_email(session, email_id)


def retry_scheduled_email(session: Session, email_id: int) -> ScheduledEmail:
    """Move a ``failed`` email back to ``pending`` for the next sweep.

    The retried email is flagged to send immediately and its failure details
    are cleared.
    """

    repository = ScheduledEmailRepository(session)
    email = get_scheduled_email(session, email_id)
    if not email.can_retry() or not repository.requeue(email_id):
        current = repository.get(email_id) or email
        raise EmailTransitionError(email_id, "retry", current.status)

    logger.info("Scheduled email %s queued for retry", email_id)
    return get_scheduled_email(session, email_id)
