"""
Refresh Token Use Case

Handles JWT token refresh with refresh token rotation for security.
"""

import logging
from uuid import UUID

from src.api.utils.jwt import TokenIssuer
from src.libs.result import Error, Result, Return
from src.app.services.hashing import check_token, hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import TokenType
from .dtos import AuthenticatedResponse, ClientInfo, UserProfile
from .session_issuer import issue_token_pair

logger = logging.getLogger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT access tokens.

    Business Rules:
    - Refresh token must verify against the refresh secret first
    - Candidate sessions: owner's non-revoked, non-expired sessions
    - Token hash verification using bcrypt (linear scan, no plaintext index)
    - Rotation rewrites the matched session in place (one row per login)
    - Rotation is a compare-and-swap on the previous hash, so two concurrent
      refreshes with the same token cannot both succeed
    - A well-formed token with no live matching session is rejected
    """

    def __init__(self, uow: UnitOfWork, tokens: TokenIssuer):
        self.uow = uow
        self.tokens = tokens

    async def execute(
        self, refresh_token: str, client: ClientInfo
    ) -> Result[AuthenticatedResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: The refresh token to verify and rotate
            client: User agent and IP of the caller

        Returns:
            Result with AuthenticatedResponse containing new tokens, or Error
        """
        payload = self.tokens.verify(TokenType.refresh, refresh_token)
        if payload is None:
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

        user_id = UUID(payload["sub"])
        now = utcnow()

        async with self.uow:
            sessions = await self.uow.sessions.get_active_by_user_id(user_id, now)

            matching_session = None
            for session in sessions:
                if check_token(refresh_token, session.refresh_token_hash):
                    matching_session = session
                    break

            if matching_session is None:
                logger.warning("Refresh rejected: no live session for user %s", user_id)
                return Return.err(Error("SESSION_INVALID", "Session invalid or expired"))

            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("SESSION_INVALID", "Session invalid or expired"))
            if not user.is_active:
                return Return.err(Error("ACCOUNT_DISABLED", "User account is disabled"))

            access_token, new_refresh_token = issue_token_pair(self.tokens, user)

            # Update session with new token hash (token rotation)
            rotated = await self.uow.sessions.rotate(
                matching_session.id,
                expected_hash=matching_session.refresh_token_hash,
                new_hash=hash_token(new_refresh_token),
                expires_at=now + self.tokens.lifetime(TokenType.refresh),
                user_agent=client.user_agent,
                ip=client.ip,
                now=now,
            )
            if not rotated:
                logger.warning(
                    "Refresh rejected: session %s was rotated concurrently",
                    matching_session.id,
                )
                return Return.err(Error("SESSION_INVALID", "Session invalid or expired"))

            session_id = str(matching_session.id)
            profile = UserProfile.from_user(user)
            await self.uow.commit()

            logger.info("Session %s rotated for user %s", session_id, user_id)

            return Return.ok(
                AuthenticatedResponse(
                    access_token=access_token,
                    refresh_token=new_refresh_token,
                    session_id=session_id,
                    user=profile,
                )
            )
