"""
Two-Factor Use Case DTOs
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TwoFactorSetupResponse(BaseModel):
    """Secret and scannable provisioning QR code (PNG data URL)"""

    model_config = ConfigDict(populate_by_name=True)

    secret: str
    qr_code: str = Field(alias="qrCode")


class TwoFactorEnabledResponse(BaseModel):
    """Backup codes are returned in plaintext exactly once"""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    backup_codes: List[str] = Field(alias="backupCodes")
