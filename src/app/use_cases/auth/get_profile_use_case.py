"""
Get Profile Use Case

Loads the safe projection of the current account.
"""

from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import UserProfile


class GetProfileUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[UserProfile]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            if not user.is_active:
                return Return.err(Error("ACCOUNT_DISABLED", "User account is disabled"))

            return Return.ok(UserProfile.from_user(user))
