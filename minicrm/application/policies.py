"""Authorization decisions for scheduled emails.

Every rule about who may see or act on an email lives here so the route
handlers only translate the decision into a response.
"""

from __future__ import annotations

from dataclasses import dataclass

from minicrm.domain.entities import ScheduledEmail, User


@dataclass(frozen=True)
class EmailAccess:
    """What ``user`` may do with one scheduled email."""

    can_view: bool
    can_cancel: bool
    can_retry: bool


@dataclass(frozen=True)
class EmailListScope:
    """Ownership filter applied when listing emails.

    ``None`` in both fields means the listing is unrestricted.
    """

    creator_id: int | None = None
    company_id: int | None = None


def can_manage_emails(user: User) -> bool:
    return user.is_active and (user.is_super_admin() or user.is_manager())


def evaluate_email_access(user: User, email: ScheduledEmail) -> EmailAccess:
    """Return the access ``user`` has on ``email``."""

    if not can_manage_emails(user):
        return EmailAccess(can_view=False, can_cancel=False, can_retry=False)

    if user.is_super_admin() or email.created_by == user.id:
        return EmailAccess(can_view=True, can_cancel=True, can_retry=True)

    # Managers can read emails of their own company but only act on their own
    same_company = user.company_id is not None and email.company_id == user.company_id
    return EmailAccess(can_view=same_company, can_cancel=False, can_retry=False)


def email_list_scope(user: User) -> EmailListScope:
    """Return the listing filter for ``user``.

    Raises ``PermissionError`` for users who cannot manage emails at all.
    """

    if not can_manage_emails(user):
        raise PermissionError("Only administrators and managers can list emails")
    if user.is_super_admin():
        return EmailListScope()
    return EmailListScope(creator_id=user.id, company_id=user.company_id)


__all__ = [
    "EmailAccess",
    "EmailListScope",
    "can_manage_emails",
    "email_list_scope",
    "evaluate_email_access",
]
