"""Read-only listing of scheduled emails."""

from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from minicrm.application.policies import EmailListScope
from minicrm.domain.entities import EMAIL_STATUSES, ScheduledEmail
from minicrm.domain.exceptions import EmailValidationError
from minicrm.infrastructure.repositories import ScheduledEmailRepository


@dataclass(frozen=True)
class EmailPage:
    """One page of scheduled emails plus pagination metadata."""

    items: list[ScheduledEmail]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def list_scheduled_emails(
    session: Session,
    *,
    scope: EmailListScope,
    status: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> EmailPage:
    """Return the emails visible under ``scope``, newest first."""

    if status and status not in EMAIL_STATUSES:
        raise EmailValidationError(f"Unknown email status '{status}'")

    page = max(1, page)
    limit = max(1, limit)
    items, total = ScheduledEmailRepository(session).list(
        creator_id=scope.creator_id,
        company_id=scope.company_id,
        status=status or None,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return EmailPage(items=items, total=total, page=page, limit=limit)
