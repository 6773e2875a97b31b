"""
Enable Two-Factor Use Case

Confirms TOTP enrollment and issues backup codes.
"""

import logging
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.two_factor import TwoFactorManager
from src.app.services.unit_of_work import UnitOfWork
from .dtos import TwoFactorEnabledResponse

logger = logging.getLogger(__name__)


class EnableTwoFactorUseCase:
    """
    Business Rules:
    - Setup must have stored a secret first
    - Code must verify within ±2 time steps
    - 10 backup codes generated, only their bcrypt hashes persisted
    """

    def __init__(self, uow: UnitOfWork, two_factor: TwoFactorManager):
        self.uow = uow
        self.two_factor = two_factor

    async def execute(self, user_id: UUID, code: str) -> Result[TwoFactorEnabledResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None or not user.two_factor_secret:
                return Return.err(
                    Error("TWO_FACTOR_NOT_SETUP", "Two-factor setup must be started first")
                )

            backup_codes = self.two_factor.enable(user, code)
            if backup_codes is None:
                return Return.err(Error("INVALID_CODE", "Invalid two-factor code"))

            await self.uow.users.update(user)
            await self.uow.commit()

            logger.info("2FA enabled for user %s", user_id)
            return Return.ok(
                TwoFactorEnabledResponse(
                    message="Two-factor authentication enabled",
                    backup_codes=backup_codes,
                )
            )
