"""
Register Use Case

Creates a new account in the credential store.
"""

import logging
from typing import Iterable

from src.libs.result import Error, Result, Return
from src.app.repositories.user_repository import DuplicateUserError
from src.app.services.hashing import hash_secret
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Role, User
from .dtos import RegisterCommand, UserProfile

logger = logging.getLogger(__name__)


class RegisterUseCase:
    """
    Register Use Case

    Business Logic:
    1. Reject a username already in use (case-insensitive) or reserved for
       a service account
    2. Reject an email already in use, when one is given
    3. Hash password with bcrypt
    4. Default roles to [user]
    5. Return the safe account projection

    A concurrent registration that wins the unique constraint is reported
    the same way as one found by the lookups.
    """

    def __init__(self, uow: UnitOfWork, reserved_usernames: Iterable[str] = ()):
        self.uow = uow
        self.reserved_usernames = {name.strip().lower() for name in reserved_usernames}

    async def execute(self, command: RegisterCommand) -> Result[UserProfile]:
        username = command.username.strip().lower()
        email = command.email.strip().lower() if command.email else None

        if username in self.reserved_usernames:
            logger.warning("Registration rejected: %s is reserved", username)
            return Return.err(Error("USERNAME_TAKEN", "Username is already in use"))

        async with self.uow:
            if await self.uow.users.get_by_username(username):
                return Return.err(Error("USERNAME_TAKEN", "Username is already in use"))

            if email and await self.uow.users.get_by_email(email):
                return Return.err(Error("EMAIL_TAKEN", "Email is already in use"))

            user = User(
                username=username,
                email=email,
                full_name=command.full_name,
                password_hash=hash_secret(command.password),
                roles=list(command.roles) if command.roles else [Role.user.value],
            )
            try:
                user = await self.uow.users.create(user)
            except DuplicateUserError as exc:
                logger.warning("Registration of %s lost a race on %s", username, exc.field)
                if exc.field == "email":
                    return Return.err(Error("EMAIL_TAKEN", "Email is already in use"))
                return Return.err(Error("USERNAME_TAKEN", "Username is already in use"))
            await self.uow.commit()

            logger.info("Registered user %s (%s)", user.id, username)
            return Return.ok(UserProfile.from_user(user))
