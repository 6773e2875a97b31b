"""
Bcrypt helpers for passwords, refresh tokens and backup codes.
"""

import hashlib

import bcrypt

from config import ApplicationConfig


def hash_secret(value: str) -> str:
    """Bcrypt-hash a short secret (password, backup code)"""
    hashed = bcrypt.hashpw(value.encode("utf-8"), bcrypt.gensalt(ApplicationConfig.BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def check_secret(value: str, hashed: str) -> bool:
    """Constant-time bcrypt check; malformed hashes or oversized input never match"""
    try:
        return bcrypt.checkpw(value.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, AttributeError):
        return False


def _token_digest(token: str) -> str:
    # JWTs exceed bcrypt's 72-byte input limit
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def hash_token(token: str) -> str:
    """Bcrypt-hash a refresh token"""
    return hash_secret(_token_digest(token))


def check_token(token: str, hashed: str) -> bool:
    return check_secret(_token_digest(token), hashed)
