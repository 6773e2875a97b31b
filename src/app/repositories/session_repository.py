from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_active_by_user_id(self, user_id: UUID, now: datetime) -> List[Session]:
        """Get non-revoked, non-expired sessions for a user (refresh candidates)"""
        pass

    @abstractmethod
    async def get_unrevoked_by_user_id(self, user_id: UUID) -> List[Session]:
        """Get non-revoked sessions for a user (logout candidates)"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def rotate(
        self,
        session_id: UUID,
        expected_hash: str,
        new_hash: str,
        expires_at: datetime,
        user_agent: str,
        ip: str,
        now: datetime,
    ) -> bool:
        """
        Replace the refresh token hash of a live session in place.

        Compare-and-swap on the previous hash: returns False when another
        request rotated or revoked the session first.
        """
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session. Returns True if session existed and was revoked."""
        pass

    @abstractmethod
    async def delete_stale(
        self, now: datetime, revoked_before: datetime, inactive_before: datetime
    ) -> int:
        """
        Delete sessions that are expired, revoked before revoked_before,
        or unrefreshed since inactive_before. Returns count of deleted rows.
        """
        pass
