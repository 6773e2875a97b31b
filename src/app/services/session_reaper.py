"""Scheduled background sweep of stale sessions."""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timedelta
from typing import Callable, Optional

from croniter import croniter

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import CleanupSessionsUseCase
from src.domain.base import utcnow

logger = logging.getLogger(__name__)

UnitOfWorkScope = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


class SessionReaper:
    """
    Manage the background task that deletes stale sessions on a cron schedule.

    One reaper runs per process. With several instances, overlapping runs only
    repeat idempotent deletes; no lock is taken.
    """

    def __init__(
        self,
        uow_scope: UnitOfWorkScope,
        cron_expression: str,
        revoked_retention: timedelta = timedelta(days=7),
        inactivity: timedelta = timedelta(days=30),
    ) -> None:
        if not croniter.is_valid(cron_expression):
            raise ValueError(f"Invalid cron expression: {cron_expression!r}")
        self._uow_scope = uow_scope
        self._cron_expression = cron_expression
        self._revoked_retention = revoked_retention
        self._inactivity = inactivity
        self._task: Optional[asyncio.Task[None]] = None
        self._stop_event: Optional[asyncio.Event] = None

    def seconds_until_next_run(self, now: Optional[datetime] = None) -> float:
        now = now or utcnow()
        next_run = croniter(self._cron_expression, now).get_next(datetime)
        return max((next_run - now).total_seconds(), 0.0)

    async def start(self) -> None:
        """Spawn the background loop"""
        if self._task is not None:
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run(self._stop_event))
        logger.info("Session reaper scheduled with cron %r", self._cron_expression)

    async def stop(self) -> None:
        """Signal the background loop to exit and wait for completion"""
        if self._task is None or self._stop_event is None:
            return

        self._stop_event.set()
        task = self._task
        try:
            await task
        finally:
            self._task = None
            self._stop_event = None

    async def run_once(self) -> int:
        async with self._uow_scope() as uow:
            use_case = CleanupSessionsUseCase(
                uow, revoked_retention=self._revoked_retention, inactivity=self._inactivity
            )
            return await use_case.execute()

    async def _run(self, stop_event: asyncio.Event) -> None:
        while True:
            try:
                await asyncio.wait_for(
                    stop_event.wait(), timeout=self.seconds_until_next_run()
                )
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                # Already logged by the use case; retry on the next tick
                logger.warning("Session reaper run failed, waiting for next schedule")
