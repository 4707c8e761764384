"""SendGrid transport used to deliver scheduled emails."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any

from anyio import to_thread
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail, ReplyTo, To

from minicrm.config import get_settings

logger = logging.getLogger(__name__)

TRANSPORT_NOT_CONFIGURED = "Email transport is not configured"


@dataclass(frozen=True)
class OutboundEmail:
    """Fully rendered message ready to be handed to the transport."""

    from_name: str
    reply_to: str
    to_name: str
    to_email: str
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class EmailSendResult:
    """Outcome of one delivery attempt."""

    success: bool
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def ok(cls, status_code: int | None = None) -> "EmailSendResult":
        return cls(success=True, status_code=status_code)

    @classmethod
    def failed(cls, error: str, status_code: int | None = None) -> "EmailSendResult":
        return cls(success=False, error=error, status_code=status_code)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        # Unrecognised payloads are reported verbatim
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_sendgrid_exception(exc: Exception) -> str:
    """Log a SendGrid API error and return a short diagnostic for the record."""

    status_code = getattr(exc, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(exc, "body", None))

    if status_code and details:
        logger.error(
            "SendGrid API request failed with status %s: %s", status_code, details
        )
        return f"SendGrid request failed with status {status_code}: {details}"
    if status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
        return f"SendGrid request failed with status {status_code}"
    if details:
        logger.error("SendGrid API request failed: %s", details)
        return f"SendGrid request failed: {details}"
    logger.exception("Error sending email via SendGrid: %s", exc)
    return f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__


def _describe_unsuccessful_response(response: Any) -> str:
    """Log details from an unsuccessful SendGrid response and describe it."""

    status_code = getattr(response, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(response, "body", None))

    if details:
        logger.error(
            "SendGrid API responded with status %s: %s", status_code, details
        )
        return f"SendGrid responded with status {status_code}: {details}"
    logger.error("SendGrid API responded with status %s", status_code)
    return f"SendGrid responded with status {status_code}"


def build_sendgrid_message(email: OutboundEmail, sender: str) -> Mail:
    message = Mail(
        from_email=From(sender, email.from_name),
        to_emails=To(email.to_email, email.to_name),
        subject=email.subject,
        html_content=email.html,
        plain_text_content=email.text,
    )
    if email.reply_to:
        message.reply_to = ReplyTo(email.reply_to, email.from_name)
    return message


def send_email(email: OutboundEmail) -> EmailSendResult:
    """Send ``email`` using the configured SendGrid credentials.

    This call blocks on network I/O; asynchronous callers go through
    :class:`SendGridTransport`.
    """

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return EmailSendResult.failed(TRANSPORT_NOT_CONFIGURED)

    message = build_sendgrid_message(email, settings.sendgrid_sender)

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:  # noqa: BLE001 - every client error is a failed attempt
        return EmailSendResult.failed(
            _describe_sendgrid_exception(exc), getattr(exc, "status_code", None)
        )

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        return EmailSendResult.failed(
            _describe_unsuccessful_response(response),
            status_code if isinstance(status_code, int) else None,
        )

    return EmailSendResult.ok(status_code)


class SendGridTransport:
    """Async adapter running :func:`send_email` in a worker thread.

    The worker thread is abandoned when the caller's timeout cancels the
    await; the HTTP request itself cannot be preempted.
    """

    async def __call__(self, email: OutboundEmail) -> EmailSendResult:
        return await to_thread.run_sync(
            partial(send_email, email), abandon_on_cancel=True
        )


__all__ = [
    "EmailSendResult",
    "OutboundEmail",
    "SendGridTransport",
    "TRANSPORT_NOT_CONFIGURED",
    "build_sendgrid_message",
    "send_email",
]
