"""Use cases for scheduled emails."""

from .control import cancel_scheduled_email, get_scheduled_email, retry_scheduled_email
from .create_email import create_scheduled_email
from .dispatch import (
    DISPATCH_FAILED,
    DISPATCH_SENT,
    DISPATCH_SKIPPED,
    DispatchOutcome,
    EmailDispatcher,
    build_outbound_email,
    summarize_outcomes,
)
from .list_emails import EmailPage, list_scheduled_emails

__all__ = [
    "DISPATCH_FAILED",
    "DISPATCH_SENT",
    "DISPATCH_SKIPPED",
    "DispatchOutcome",
    "EmailDispatcher",
    "EmailPage",
    "build_outbound_email",
    "cancel_scheduled_email",
    "create_scheduled_email",
    "get_scheduled_email",
    "list_scheduled_emails",
    "retry_scheduled_email",
    "summarize_outcomes",
]
