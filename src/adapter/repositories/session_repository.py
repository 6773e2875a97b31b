from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import and_, delete, or_
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_by_user_id(self, user_id: UUID, now: datetime) -> List[Session]:
        """
        Get refresh candidates for a user.

        Only the plaintext-free hash is stored, so the caller still has to
        bcrypt-compare the presented token against each candidate.
        """
        stmt = select(Session).where(
            Session.user_id == user_id,
            Session.revoked == False,
            Session.expires_at > now,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_unrevoked_by_user_id(self, user_id: UUID) -> List[Session]:
        """Get non-revoked sessions for a user"""
        stmt = select(Session).where(
            Session.user_id == user_id,
            Session.revoked == False,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

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
        """Rotate the refresh token hash only if nobody rotated it first"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token_hash == expected_hash,
                Session.revoked == False,
            )
            .values(
                refresh_token_hash=new_hash,
                expires_at=expires_at,
                last_refreshed_at=now,
                updated_at=now,
                user_agent=user_agent,
                ip=ip,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)
            .values(revoked=True, revoked_at=now, updated_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def delete_stale(
        self, now: datetime, revoked_before: datetime, inactive_before: datetime
    ) -> int:
        """Delete expired, long-revoked and abandoned sessions"""
        stmt = (
            delete(Session)
            .where(
                or_(
                    # Refresh token lifetime is over
                    Session.expires_at < now,
                    # Revoked and untouched since the retention window
                    and_(
                        Session.revoked == True,
                        Session.updated_at < revoked_before,
                    ),
                    # Live but abandoned: never rotated since creation, or not since last rotation
                    and_(
                        Session.revoked == False,
                        or_(
                            Session.last_refreshed_at < inactive_before,
                            and_(
                                Session.last_refreshed_at.is_(None),
                                Session.created_at < inactive_before,
                            ),
                        ),
                    ),
                )
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
