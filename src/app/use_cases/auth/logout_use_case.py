"""
Logout Use Case

Revokes the session that owns the presented refresh token.
"""

import logging
from uuid import UUID

from src.libs.result import Result, Return
from src.app.services.hashing import check_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for logout.

    Business Rules:
    - Only the caller's own non-revoked sessions are candidates
    - Idempotent: an unknown or already revoked token is a silent no-op
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, refresh_token: str) -> Result[bool]:
        """
        Returns:
            Result with True if a session was revoked, False otherwise
        """
        async with self.uow:
            sessions = await self.uow.sessions.get_unrevoked_by_user_id(user_id)

            for session in sessions:
                if check_token(refresh_token, session.refresh_token_hash):
                    session_id = session.id
                    revoked = await self.uow.sessions.revoke_by_id(session_id, utcnow())
                    await self.uow.commit()
                    logger.info("Session %s revoked by logout", session_id)
                    return Return.ok(revoked)

            return Return.ok(False)
