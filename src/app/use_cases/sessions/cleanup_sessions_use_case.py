"""
Cleanup Sessions Use Case

Deletes session rows that can never be refreshed again or were abandoned.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class CleanupSessionsUseCase:
    """
    Business Rules - a session is deleted when ANY of:
    1. expires_at has passed
    2. revoked and not modified for revoked_retention (7 days)
    3. not revoked and not refreshed for inactivity (30 days), counting from
       created_at when it was never refreshed

    Failures are logged and re-raised; the scheduler decides what to do next.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        revoked_retention: timedelta = timedelta(days=7),
        inactivity: timedelta = timedelta(days=30),
    ):
        self.uow = uow
        self.revoked_retention = revoked_retention
        self.inactivity = inactivity

    async def execute(self, now: Optional[datetime] = None) -> int:
        """
        Returns:
            Number of deleted sessions
        """
        now = now or utcnow()
        try:
            async with self.uow:
                deleted = await self.uow.sessions.delete_stale(
                    now=now,
                    revoked_before=now - self.revoked_retention,
                    inactive_before=now - self.inactivity,
                )
                await self.uow.commit()
        except Exception:
            logger.exception("Session cleanup failed")
            raise

        logger.info("Session cleanup removed %d session(s)", deleted)
        return deleted
