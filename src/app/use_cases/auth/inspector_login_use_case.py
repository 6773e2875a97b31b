"""
Inspector Login Use Case

Lets unattended field devices authenticate with a pre-shared key.
"""

import logging
import secrets
from typing import Optional

from src.api.utils.jwt import TokenIssuer
from src.libs.result import Error, Result, Return
from src.app.repositories.user_repository import DuplicateUserError
from src.app.services.hashing import hash_secret
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Role, User
from .dtos import AuthenticatedResponse, ClientInfo
from .session_issuer import SessionIssuer

logger = logging.getLogger(__name__)


class InspectorLoginUseCase:
    """
    Use case for pre-shared-key device login.

    Business Rules:
    - Key compared in constant time; an unconfigured key rejects everyone
    - First use provisions a dedicated system account with a random password
      that is never disclosed (no interactive login possible)
    - Later uses reuse the same account, but only if it is the provisioned
      service account; a regular account holding the handle is refused
    - Two devices provisioning at once: the loser reloads the winner's account
    - A deactivated inspector account is forbidden
    - Produces an ordinary session and token pair
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tokens: TokenIssuer,
        inspector_key: str,
        inspector_username: str,
    ):
        self.uow = uow
        self.tokens = tokens
        self.inspector_key = inspector_key
        self.inspector_username = inspector_username

    async def execute(
        self, presented_key: str, device_id: Optional[str], client: ClientInfo
    ) -> Result[AuthenticatedResponse]:
        if not self.inspector_key or not secrets.compare_digest(
            presented_key.encode("utf-8"), self.inspector_key.encode("utf-8")
        ):
            logger.warning("Inspector login rejected from %s", client.ip)
            return Return.err(Error("INVALID_INSPECTOR_KEY", "Invalid inspector API key"))

        async with self.uow:
            user = await self._get_or_provision_account()

            if not user.is_service_account:
                logger.error(
                    "Inspector login refused: %s is not a service account", self.inspector_username
                )
                return Return.err(
                    Error("INSPECTOR_ACCOUNT_CONFLICT", "Inspector account handle is in use")
                )

            if not user.is_active:
                return Return.err(
                    Error("ACCOUNT_DISABLED", "Inspector account is deactivated")
                )

            logger.info("Inspector login from device %s", device_id or "unknown")
            response = await SessionIssuer(self.uow, self.tokens).issue(
                user, client, device_id=device_id
            )
            return Return.ok(response)

    async def _get_or_provision_account(self) -> User:
        user = await self.uow.users.get_by_username(self.inspector_username)
        if user is not None:
            return user

        user = User(
            username=self.inspector_username,
            email=f"{self.inspector_username}@system.local",
            full_name="Inspector Técnico",
            password_hash=hash_secret(secrets.token_hex(32)),
            roles=[Role.user.value, Role.inspector.value],
            is_service_account=True,
        )
        try:
            user = await self.uow.users.create(user)
        except DuplicateUserError:
            # Another device provisioned it first
            await self.uow.rollback()
            existing = await self.uow.users.get_by_username(self.inspector_username)
            if existing is None:
                raise
            return existing

        logger.info("Provisioned inspector account %s", user.id)
        return user
