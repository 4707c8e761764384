"""Errors raised by use cases and translated to HTTP responses by the API."""

from __future__ import annotations


class EmailNotFoundError(ValueError):
    """Raised when a scheduled email does not exist."""

    def __init__(self, email_id: int) -> None:
        super().__init__(f"Scheduled email {email_id} not found")
        self.email_id = email_id


class EmailValidationError(ValueError):
    """Raised when a scheduled email cannot be created with the given data."""


class EmailTransitionError(ValueError):
    """Raised when a cancel or retry is requested from a status that forbids it."""

    def __init__(self, email_id: int, action: str, status: str) -> None:
        reason = "not cancellable" if action == "cancel" else "not retryable"
        super().__init__(
            f"Scheduled email {email_id} is {reason} while its status is '{status}'"
        )
        self.email_id = email_id
        self.action = action
        self.status = status


class NotificationNotFoundError(ValueError):
    """Raised when a notification does not exist for the requesting user."""

    def __init__(self, notification_id: int) -> None:
        super().__init__(f"Notification {notification_id} not found")
        self.notification_id = notification_id


__all__ = [
    "EmailNotFoundError",
    "EmailTransitionError",
    "EmailValidationError",
    "NotificationNotFoundError",
]
