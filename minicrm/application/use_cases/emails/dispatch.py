"""Deliver due scheduled emails in small concurrent groups.

Each record is handled independently: a failure, a timeout or an exception on
one email is recorded on that email and never prevents the rest of its group
from completing. Groups run one after another, so at most ``group_size``
transport calls are in flight at any time.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar

import anyio
from anyio import to_thread
from sqlalchemy.orm import Session

from minicrm.domain.entities import EMAIL_STATUS_PENDING, ScheduledEmail
from minicrm.infrastructure.email import EmailSendResult, OutboundEmail
from minicrm.infrastructure.email_templates import EmailContent, RenderedEmail, render_email
from minicrm.infrastructure.repositories import ScheduledEmailRepository
from minicrm.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

DISPATCH_SENT = "sent"
DISPATCH_FAILED = "failed"
DISPATCH_SKIPPED = "skipped"

T = TypeVar("T")

SessionFactory = Callable[[], Session]
EmailTransport = Callable[[OutboundEmail], Awaitable[EmailSendResult]]
EmailRenderer = Callable[[str | None, EmailContent], RenderedEmail]
Clock = Callable[[], datetime]


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of handling one email during a sweep."""

    email_id: int
    status: str
    error: str | None = None


def summarize_outcomes(outcomes: Sequence[DispatchOutcome]) -> dict[str, int]:
    counts = Counter(outcome.status for outcome in outcomes)
    return {
        status: counts.get(status, 0)
        for status in (DISPATCH_SENT, DISPATCH_FAILED, DISPATCH_SKIPPED)
    }


def build_outbound_email(
    email: ScheduledEmail, renderer: EmailRenderer = render_email
) -> OutboundEmail:
    """Render ``email`` with its template into a transport-ready message."""

    rendered = renderer(
        email.template,
        EmailContent(
            subject=email.subject,
            from_name=email.from_name,
            to_name=email.to_name,
            message=email.message,
        ),
    )
    return OutboundEmail(
        from_name=email.from_name,
        reply_to=email.from_email,
        to_name=email.to_name,
        to_email=email.to_email,
        subject=rendered.subject,
        html=rendered.html,
        text=rendered.text,
    )


def _describe_exception(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__


class EmailDispatcher:
    """Send a batch of due emails and persist each outcome."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        transport: EmailTransport,
        renderer: EmailRenderer = render_email,
        group_size: int = 5,
        timeout: float = 30.0,
        clock: Clock = now_in_app_timezone,
    ) -> None:
        if group_size < 1:
            raise ValueError("group_size must be at least 1")
        self._session_factory = session_factory
        self._transport = transport
        self._renderer = renderer
        self._group_size = group_size
        self._timeout = timeout
        self._clock = clock

    @property
    def group_size(self) -> int:
        return self._group_size

    async def dispatch(self, emails: Sequence[ScheduledEmail]) -> list[DispatchOutcome]:
        """Send ``emails`` group by group and return one outcome per email."""

        outcomes: list[DispatchOutcome] = []
        for start in range(0, len(emails), self._group_size):
            group = emails[start : start + self._group_size]
            results: list[DispatchOutcome | None] = [None] * len(group)
            async with anyio.create_task_group() as task_group:
                for index, email in enumerate(group):
                    task_group.start_soon(self._dispatch_into, results, index, email)
            outcomes.extend(result for result in results if result is not None)
        return outcomes

    async def _dispatch_into(
        self, results: list[DispatchOutcome | None], index: int, email: ScheduledEmail
    ) -> None:
        results[index] = await self.dispatch_one(email)

    async def dispatch_one(self, email: ScheduledEmail) -> DispatchOutcome:
        """Handle a single email without ever raising."""

        try:
            return await self._dispatch_one(email)
        except Exception as exc:  # noqa: BLE001 - isolate failures per email
            logger.exception("Unexpected error dispatching scheduled email %s", email.id)
            return DispatchOutcome(email.id, DISPATCH_FAILED, _describe_exception(exc))

    async def _dispatch_one(self, email: ScheduledEmail) -> DispatchOutcome:
        current = await self._with_repository(lambda repository: repository.get(email.id))
        if current is None or current.status != EMAIL_STATUS_PENDING:
            logger.info(
                "Scheduled email %s is no longer pending; skipping", email.id
            )
            return DispatchOutcome(email.id, DISPATCH_SKIPPED)

        result = await self._send(current)
        now = self._clock()
        if result.success:
            applied = await self._with_repository(
                lambda repository: repository.mark_sent(current.id, sent_at=now)
            )
            outcome = DispatchOutcome(current.id, DISPATCH_SENT)
        else:
            error = result.error or "Unknown delivery error"
            applied = await self._with_repository(
                lambda repository: repository.mark_failed(
                    current.id, failed_at=now, error=error
                )
            )
            outcome = DispatchOutcome(current.id, DISPATCH_FAILED, error)

        if not applied:
            logger.warning(
                "Scheduled email %s changed status while being sent; keeping the new status",
                current.id,
            )
            return DispatchOutcome(current.id, DISPATCH_SKIPPED, outcome.error)

        if outcome.status == DISPATCH_SENT:
            logger.info("Scheduled email %s sent to %s", current.id, current.to_email)
        else:
            logger.warning("Scheduled email %s failed: %s", current.id, outcome.error)
        return outcome

    async def _send(self, email: ScheduledEmail) -> EmailSendResult:
        try:
            message = build_outbound_email(email, self._renderer)
            with anyio.fail_after(self._timeout):
                return await self._transport(message)
        except TimeoutError:
            return EmailSendResult.failed(
                f"Email transport timed out after {self._timeout:g} seconds"
            )
        except Exception as exc:  # noqa: BLE001 - every transport error is a failed attempt
            logger.exception("Email transport raised for scheduled email %s", email.id)
            return EmailSendResult.failed(_describe_exception(exc))

    async def _with_repository(
        self, operation: Callable[[ScheduledEmailRepository], T]
    ) -> T:
        def _run() -> T:
            with self._session_factory() as session:
                return operation(ScheduledEmailRepository(session))

        return await to_thread.run_sync(_run)


__all__ = [
    "DISPATCH_FAILED",
    "DISPATCH_SENT",
    "DISPATCH_SKIPPED",
    "DispatchOutcome",
    "EmailDispatcher",
    "EmailTransport",
    "build_outbound_email",
    "summarize_outcomes",
]
