import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Dict, Optional

from jose import JWTError, jwt

from src.domain.entities import TokenType

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenSettings:
    """Signing secret and lifetime of one token class"""

    secret: str
    lifetime: timedelta


class TokenIssuer:
    """
    Signs and verifies the three bearer token classes.

    Every token carries its class in the ``typ`` claim. ``verify`` checks both
    the class secret and the claim, so a token of one class is never accepted
    as another even if two secrets were configured identically.
    """

    def __init__(self, settings: Dict[TokenType, TokenSettings]):
        missing = [t.value for t in TokenType if t not in settings]
        if missing:
            raise ValueError(f"Missing token settings for: {', '.join(missing)}")
        self._settings = dict(settings)

    def lifetime(self, token_type: TokenType) -> timedelta:
        return self._settings[token_type].lifetime

    def sign(
        self, token_type: TokenType, claims: dict, now: Optional[datetime] = None
    ) -> str:
        """
        Sign a token of the given class

        Args:
            token_type: access, refresh or temp_2fa
            claims: Payload claims (sub, username, roles, ...)
            now: Issue time, defaults to the current time

        Returns:
            JWT token string (HS256)
        """
        settings = self._settings[token_type]
        issued_at = now or datetime.now(UTC)
        payload = {
            **claims,
            "typ": token_type.value,
            "jti": secrets.token_hex(16),
            "iat": issued_at,
            "exp": issued_at + settings.lifetime,
        }
        return jwt.encode(payload, settings.secret, algorithm=ALGORITHM)

    def verify(self, token_type: TokenType, token: str) -> Optional[dict]:
        """
        Verify and decode a token of the given class

        Returns:
            Decoded payload dict or None if invalid, expired or of another class
        """
        settings = self._settings[token_type]
        try:
            payload = jwt.decode(token, settings.secret, algorithms=[ALGORITHM])
        except JWTError:
            return None

        if payload.get("typ") != token_type.value or not payload.get("sub"):
            return None
        return payload


def create_token_issuer(config) -> TokenIssuer:
    """Build the issuer from application configuration"""
    return TokenIssuer(
        {
            TokenType.access: TokenSettings(
                config.JWT_ACCESS_SECRET, timedelta(minutes=config.ACCESS_TOKEN_MINUTES)
            ),
            TokenType.refresh: TokenSettings(
                config.JWT_REFRESH_SECRET, timedelta(days=config.REFRESH_TOKEN_DAYS)
            ),
            TokenType.temp_2fa: TokenSettings(
                config.JWT_TEMP_SECRET, timedelta(minutes=config.TEMP_TOKEN_MINUTES)
            ),
        }
    )
