"""
TOTP second factor and single-use backup codes.

The manager mutates the User entity in memory; callers persist it through the
unit of work in the same transaction as the rest of the operation.
"""

import base64
import logging
import secrets
from io import BytesIO
from typing import List, Optional

import pyotp
import qrcode

from src.domain.entities import User

from .hashing import check_secret, hash_secret

logger = logging.getLogger(__name__)

SECRET_LENGTH = 32
VALID_WINDOW = 2  # accept codes up to two 30s steps away
BACKUP_CODE_COUNT = 10


class TwoFactorManager:
    def __init__(self, issuer_name: str):
        self.issuer_name = issuer_name

    def begin_setup(self, user: User) -> tuple[str, str]:
        """
        Store a fresh secret on the user (not enabled yet).

        Returns:
            (base32 secret, PNG data URL of the otpauth provisioning URI)
        """
        secret = pyotp.random_base32(length=SECRET_LENGTH)
        user.two_factor_secret = secret

        uri = pyotp.TOTP(secret).provisioning_uri(
            name=user.username, issuer_name=self.issuer_name
        )
        return secret, qr_code_data_url(uri)

    def enable(self, user: User, code: str) -> Optional[List[str]]:
        """
        Enable 2FA if the code matches the stored secret.

        Returns:
            The plaintext backup codes (shown once), or None for a bad code
        """
        if not verify_totp(user.two_factor_secret, code):
            return None

        codes = generate_backup_codes()
        user.two_factor_enabled = True
        user.backup_codes = [hash_secret(c) for c in codes]
        return codes

    def verify(self, user: User, code: str) -> bool:
        """TOTP code first, then a backup code (consumed on match)"""
        if verify_totp(user.two_factor_secret, code):
            return True
        return self.consume_backup_code(user, code)

    def consume_backup_code(self, user: User, code: str) -> bool:
        candidate = code.strip().upper()
        for index, hashed in enumerate(user.backup_codes or []):
            if check_secret(candidate, hashed):
                # Reassign so the JSON column is flagged dirty
                user.backup_codes = user.backup_codes[:index] + user.backup_codes[index + 1:]
                logger.info(
                    "Backup code used for user %s, %d left", user.id, len(user.backup_codes)
                )
                return True
        return False

    def disable(self, user: User, code: str) -> bool:
        if not verify_totp(user.two_factor_secret, code):
            return False

        user.two_factor_enabled = False
        user.two_factor_secret = None
        user.backup_codes = []
        return True


def verify_totp(secret: Optional[str], code: str) -> bool:
    if not secret or not code:
        return False
    return pyotp.TOTP(secret).verify(code.strip(), valid_window=VALID_WINDOW)


def generate_backup_codes(count: int = BACKUP_CODE_COUNT) -> List[str]:
    return [secrets.token_hex(4).upper() for _ in range(count)]


def qr_code_data_url(uri: str) -> str:
    qr = qrcode.QRCode(version=1, box_size=6, border=2)
    qr.add_data(uri)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{encoded}"
