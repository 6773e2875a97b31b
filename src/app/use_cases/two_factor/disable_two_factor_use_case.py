"""
Disable Two-Factor Use Case
"""

import logging
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.two_factor import TwoFactorManager
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DisableTwoFactorUseCase:
    """
    Business Rules:
    - 2FA must be enabled
    - Requires a valid TOTP code (backup codes are not accepted here)
    - Clears secret, flag and all backup codes
    """

    def __init__(self, uow: UnitOfWork, two_factor: TwoFactorManager):
        self.uow = uow
        self.two_factor = two_factor

    async def execute(self, user_id: UUID, code: str) -> Result[str]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None or not user.two_factor_enabled:
                return Return.err(
                    Error("TWO_FACTOR_NOT_ENABLED", "Two-factor authentication is not enabled")
                )

            if not self.two_factor.disable(user, code):
                return Return.err(Error("INVALID_CODE", "Invalid two-factor code"))

            await self.uow.users.update(user)
            await self.uow.commit()

            logger.info("2FA disabled for user %s", user_id)
            return Return.ok("Two-factor authentication disabled")
