"""Periodic poller that sends due scheduled emails.

A timer fires every ``interval`` seconds and starts a sweep. Sweeps are
single-flight: a tick that arrives while a previous sweep is still running is
dropped rather than queued, so one record is never picked up by two sweeps
of the same process.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

import anyio
from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from minicrm.config import Settings
from minicrm.domain.entities import ScheduledEmail
from minicrm.infrastructure.email import SendGridTransport
from minicrm.infrastructure.repositories import ScheduledEmailRepository
from minicrm.utils import now_in_app_timezone

from .use_cases.emails import DispatchOutcome, EmailDispatcher, summarize_outcomes

logger = logging.getLogger(__name__)


class EmailScheduler:
    """Run :class:`EmailDispatcher` over due emails on a fixed interval."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        dispatcher: EmailDispatcher,
        *,
        interval: float = 60.0,
        batch_limit: int = 100,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._interval = interval
        self._batch_limit = batch_limit
        self._clock = clock
        self._sweeping = False
        self._timer: asyncio.Task | None = None
        self._sweeps: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: Callable[[], Session],
        *,
        transport=None,
    ) -> "EmailScheduler":
        dispatcher = EmailDispatcher(
            session_factory,
            transport=transport or SendGridTransport(),
            group_size=settings.dispatch_group_size,
            timeout=settings.transport_timeout_seconds,
        )
        return cls(
            session_factory,
            dispatcher,
            interval=settings.scheduler_interval_seconds,
            batch_limit=settings.scheduler_batch_limit,
        )

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def is_sweeping(self) -> bool:
        return self._sweeping

    def start(self) -> None:
        """Start the timer on the running event loop. Calling it twice is a no-op."""

        if self.is_running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run_timer())
        logger.info("Email scheduler started with a %ss interval", self._interval)

    async def stop(self) -> None:
        """Stop the timer and wait for the sweep in progress to finish."""

        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        if self._sweeps:
            await asyncio.gather(*self._sweeps, return_exceptions=True)
        logger.info("Email scheduler stopped")

    async def _run_timer(self) -> None:
        while True:
            sweep = asyncio.get_running_loop().create_task(self.tick())
            self._sweeps.add(sweep)
            sweep.add_done_callback(self._sweeps.discard)
            await anyio.sleep(self._interval)

    async def tick(self) -> bool:
        """Run one sweep unless another one is in progress.

        Returns ``False`` when the tick was dropped.
        """

        # Check and set happen without an await in between
        if self._sweeping:
            logger.debug("Previous email sweep still running; skipping this tick")
            return False
        self._sweeping = True
        try:
            await self.sweep()
        except Exception:  # noqa: BLE001 - the timer must survive a failed sweep
            logger.exception("Scheduled email sweep failed")
        finally:
            self._sweeping = False
        return True

    async def sweep(self) -> list[DispatchOutcome]:
        """Select the due emails and dispatch them."""

        now = self._clock()
        try:
            due = await to_thread.run_sync(self._select_due, now)
        except SQLAlchemyError:
            logger.exception("Could not load due scheduled emails; skipping this sweep")
            return []

        if not due:
            return []

        logger.info("Dispatching %s due scheduled emails", len(due))
        outcomes = await self._dispatcher.dispatch(due)
        counts = summarize_outcomes(outcomes)
        logger.info(
            "Email sweep finished: %s sent, %s failed, %s skipped",
            counts["sent"],
            counts["failed"],
            counts["skipped"],
        )
        return outcomes

    def _select_due(self, now: datetime) -> list[ScheduledEmail]:
        with self._session_factory() as session:
            return list(
                ScheduledEmailRepository(session).list_due(now, limit=self._batch_limit)
            )


__all__ = ["EmailScheduler"]
