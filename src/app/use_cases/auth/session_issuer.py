"""
Session issuance shared by password login, 2FA verification and inspector login.
"""

import logging
from typing import Optional

from src.api.utils.jwt import TokenIssuer
from src.app.services.hashing import hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session, TokenType, User

from .dtos import AuthenticatedResponse, ClientInfo, UserProfile

logger = logging.getLogger(__name__)


def token_claims(user: User) -> dict:
    """Claims shared by access and refresh tokens"""
    return {"sub": str(user.id), "username": user.username, "roles": list(user.roles)}


def issue_token_pair(tokens: TokenIssuer, user: User) -> tuple[str, str]:
    claims = token_claims(user)
    return tokens.sign(TokenType.access, claims), tokens.sign(TokenType.refresh, claims)


class SessionIssuer:
    """
    Mints an access/refresh pair and persists the hashed refresh token.

    Must be called inside an open unit of work; it commits the transaction.
    A login never reports success unless the session row was committed.
    """

    def __init__(self, uow: UnitOfWork, tokens: TokenIssuer):
        self.uow = uow
        self.tokens = tokens

    async def issue(
        self, user: User, client: ClientInfo, device_id: Optional[str] = None
    ) -> AuthenticatedResponse:
        access_token, refresh_token = issue_token_pair(self.tokens, user)

        session = Session(
            user_id=user.id,
            refresh_token_hash=hash_token(refresh_token),
            user_agent=client.user_agent,
            ip=client.ip,
            device_id=device_id,
            expires_at=utcnow() + self.tokens.lifetime(TokenType.refresh),
        )

        try:
            session = await self.uow.sessions.create(session)
            await self.uow.commit()
        except Exception:
            logger.exception("Failed to persist session for user %s", user.id)
            raise

        logger.info("Session %s issued for user %s from %s", session.id, user.id, client.ip)

        return AuthenticatedResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            session_id=str(session.id),
            user=UserProfile.from_user(user),
        )
