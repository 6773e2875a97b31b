"""
Verify Two-Factor Use Case

Completes a login paused by LoginUseCase.
"""

import logging
from uuid import UUID

from src.api.utils.jwt import TokenIssuer
from src.libs.result import Error, Result, Return
from src.app.services.two_factor import TwoFactorManager
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import TokenType
from .dtos import AuthenticatedResponse, ClientInfo
from .session_issuer import SessionIssuer

logger = logging.getLogger(__name__)


class VerifyTwoFactorUseCase:
    """
    Use case for the second step of a 2FA login.

    Business Rules:
    - Temp token must be valid, unexpired and of the temp_2fa class
    - Account must exist and still have 2FA enabled
    - TOTP code (±2 steps) or an unused backup code is accepted
    - A consumed backup code is persisted with the new session
    """

    def __init__(self, uow: UnitOfWork, tokens: TokenIssuer, two_factor: TwoFactorManager):
        self.uow = uow
        self.tokens = tokens
        self.two_factor = two_factor

    async def execute(
        self, temp_token: str, code: str, client: ClientInfo
    ) -> Result[AuthenticatedResponse]:
        payload = self.tokens.verify(TokenType.temp_2fa, temp_token)
        if payload is None:
            return Return.err(
                Error("INVALID_TOKEN", "Temporary token is invalid or expired")
            )

        async with self.uow:
            user = await self.uow.users.get_by_id(UUID(payload["sub"]))
            if user is None or not user.two_factor_enabled:
                return Return.err(Error("UNAUTHORIZED", "User not authorized"))

            if not user.is_active:
                return Return.err(Error("ACCOUNT_DISABLED", "User account is disabled"))

            backup_codes_before = len(user.backup_codes or [])
            if not self.two_factor.verify(user, code):
                logger.info("Invalid 2FA code for user %s", user.id)
                return Return.err(Error("INVALID_CODE", "Invalid two-factor code"))

            if len(user.backup_codes or []) != backup_codes_before:
                await self.uow.users.update(user)

            response = await SessionIssuer(self.uow, self.tokens).issue(user, client)
            return Return.ok(response)
