"""
User Entity

Credential store record: identity, password hash, roles and second-factor state.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from src.domain.base import utcnow

from .enums import Role, UserStatus


class User(SQLModel, table=True):
    """
    User entity - an account that can log in and own sessions.

    Business Rules:
    - Username is unique and stored lower-cased (case-insensitive handle)
    - Email is optional but unique when present
    - Password stored as bcrypt hash, never in plaintext
    - two_factor_secret is set by setup, two_factor_enabled only after a valid code
    - backup_codes holds bcrypt hashes; each code is removed once used
    - Disabled users fail every authentication path
    - Service accounts are only reachable through their dedicated login path
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=30)
    email: Optional[str] = Field(default=None, unique=True, index=True, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    roles: List[str] = Field(
        default_factory=lambda: [Role.user.value], sa_column=Column(JSON, nullable=False)
    )
    status: UserStatus = Field(default=UserStatus.active)
    # Provisioned by the system (inspector devices); never logs in interactively
    is_service_account: bool = Field(default=False)

    # Second factor (TOTP)
    two_factor_enabled: bool = Field(default=False)
    two_factor_secret: Optional[str] = Field(default=None, max_length=64)
    backup_codes: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active
