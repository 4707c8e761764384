"""Domain entity representing an email scheduled for delivery.

A scheduled email starts ``pending`` and ends in exactly one of ``sent``,
``failed`` or ``cancelled``. The only edge leaving a final status is the
explicit retry ``failed -> pending``::

    pending --dispatch ok-----> sent
    pending --dispatch error--> failed --retry--> pending
    pending --cancel----------> cancelled
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

EMAIL_STATUS_PENDING = "pending"
EMAIL_STATUS_SENT = "sent"
EMAIL_STATUS_FAILED = "failed"
EMAIL_STATUS_CANCELLED = "cancelled"

EMAIL_STATUSES: tuple[str, ...] = (
    EMAIL_STATUS_PENDING,
    EMAIL_STATUS_SENT,
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_CANCELLED,
)

DEFAULT_EMAIL_TEMPLATE = "default"


@dataclass
class ScheduledEmail:
    """Outbound email with its schedule and delivery outcome."""

    id: int | None
    from_name: str
    from_email: str
    to_name: str
    to_email: str
    subject: str
    message: str
    template: str
    send_now: bool
    scheduled_for: datetime | None
    status: str
    created_by: int
    company_id: int | None = None
    sent_at: datetime | None = None
    failed_at: datetime | None = None
    last_error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def can_cancel(self) -> bool:
        return self.status == EMAIL_STATUS_PENDING

    def can_retry(self) -> bool:
        return self.status == EMAIL_STATUS_FAILED


__all__ = [
    "DEFAULT_EMAIL_TEMPLATE",
    "EMAIL_STATUSES",
    "EMAIL_STATUS_CANCELLED",
    "EMAIL_STATUS_FAILED",
    "EMAIL_STATUS_PENDING",
    "EMAIL_STATUS_SENT",
    "ScheduledEmail",
]
