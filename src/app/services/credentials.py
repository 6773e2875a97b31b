"""
Credential validation against the user store.
"""

import logging
from typing import Optional

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User

from .hashing import check_secret, hash_secret

logger = logging.getLogger(__name__)

# Compared against when the username is unknown so both paths cost one bcrypt check
_DUMMY_HASH: Optional[str] = None


def _dummy_hash() -> str:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = hash_secret("dummy_password")
    return _DUMMY_HASH


async def validate_credentials(
    users: IUserRepository, username: str, password: str
) -> Optional[User]:
    """
    Return the user when the username exists, the password matches, the
    account is active and it is not a service account; otherwise None.

    Callers must not tell "unknown username" apart from "wrong password".
    """
    user = await users.get_by_username(username)

    if user is None:
        check_secret(password, _dummy_hash())
        logger.info("Login rejected: unknown username")
        return None

    if not check_secret(password, user.password_hash):
        logger.info("Login rejected: bad password for user %s", user.id)
        return None

    if not user.is_active:
        logger.info("Login rejected: user %s is disabled", user.id)
        return None

    if user.is_service_account:
        logger.warning("Login rejected: user %s is a service account", user.id)
        return None

    return user
