"""Validation helpers for scheduled email use cases."""

from __future__ import annotations

import re
from datetime import datetime

from minicrm.domain.exceptions import EmailValidationError
from minicrm.utils import ensure_app_timezone

_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def require_text(value: str | None, field_name: str) -> str:
    """Return ``value`` stripped or raise when it is blank."""

    normalized = (value or "").strip()
    if not normalized:
        raise EmailValidationError(f"The field '{field_name}' is required")
    return normalized


def ensure_valid_address(value: str | None, field_name: str) -> str:
    address = require_text(value, field_name)
    if not _EMAIL_PATTERN.match(address):
        raise EmailValidationError(f"The field '{field_name}' must be a valid email address")
    return address.lower()


def ensure_future_schedule(
    scheduled_for: datetime | None, *, now: datetime
) -> datetime:
    """Return ``scheduled_for`` localized, requiring it to be strictly after ``now``."""

    if scheduled_for is None:
        raise EmailValidationError("A scheduled date is required when the email is not sent now")
    localized = ensure_app_timezone(scheduled_for)
    if localized <= now:
        raise EmailValidationError("Scheduled date must be in the future")
    return localized
