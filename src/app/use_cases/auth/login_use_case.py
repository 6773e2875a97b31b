"""
Login Use Case

Validates credentials and either issues a session or pauses for the second factor.
"""

from typing import Union

from src.api.utils.jwt import TokenIssuer
from src.libs.result import Error, Result, Return
from src.app.services.credentials import validate_credentials
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import TokenType
from .dtos import AuthenticatedResponse, ClientInfo, TwoFactorChallenge
from .session_issuer import SessionIssuer


class LoginUseCase:
    """
    Use case for password login.

    Business Rules:
    - Unknown username, wrong password and disabled account all fail the same way
    - 2FA enabled: return a 5-minute temp token, no session is created
    - Otherwise create a session and return access + refresh tokens
    """

    def __init__(self, uow: UnitOfWork, tokens: TokenIssuer):
        self.uow = uow
        self.tokens = tokens

    async def execute(
        self, username: str, password: str, client: ClientInfo
    ) -> Result[Union[AuthenticatedResponse, TwoFactorChallenge]]:
        """
        Execute login use case.

        Args:
            username: Account handle (case-insensitive)
            password: Plain text password
            client: User agent and IP of the caller

        Returns:
            Result with AuthenticatedResponse, TwoFactorChallenge, or Error
        """
        async with self.uow:
            user = await validate_credentials(self.uow.users, username, password)
            if user is None:
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid username or password")
                )

            if user.two_factor_enabled:
                temp_token = self.tokens.sign(TokenType.temp_2fa, {"sub": str(user.id)})
                return Return.ok(TwoFactorChallenge(temp_token=temp_token))

            response = await SessionIssuer(self.uow, self.tokens).issue(user, client)
            return Return.ok(response)
