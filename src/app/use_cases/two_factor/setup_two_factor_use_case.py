"""
Setup Two-Factor Use Case

Starts TOTP enrollment: stores a new secret without enabling it yet.
"""

import logging
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.two_factor import TwoFactorManager
from src.app.services.unit_of_work import UnitOfWork
from .dtos import TwoFactorSetupResponse

logger = logging.getLogger(__name__)


class SetupTwoFactorUseCase:
    """
    Business Rules:
    - Rejected when 2FA is already enabled
    - Calling setup again before enabling replaces the pending secret
    """

    def __init__(self, uow: UnitOfWork, two_factor: TwoFactorManager):
        self.uow = uow
        self.two_factor = two_factor

    async def execute(self, user_id: UUID) -> Result[TwoFactorSetupResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.two_factor_enabled:
                return Return.err(
                    Error("TWO_FACTOR_ALREADY_ENABLED", "Two-factor authentication is already enabled")
                )

            secret, qr_code = self.two_factor.begin_setup(user)
            await self.uow.users.update(user)
            await self.uow.commit()

            logger.info("2FA setup started for user %s", user_id)
            return Return.ok(TwoFactorSetupResponse(secret=secret, qr_code=qr_code))
