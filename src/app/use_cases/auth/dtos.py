"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
Wire names are camelCase (aliases); Python attributes stay snake_case.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities import User


# ============================================================================
# Commands
# ============================================================================


class ClientInfo(BaseModel):
    """Originating client signature recorded on the session"""

    user_agent: str = "unknown"
    ip: str = "unknown"


class RegisterCommand(BaseModel):
    """Register command - validated registration intent"""

    username: str
    password: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    roles: Optional[List[str]] = None


# ============================================================================
# Response DTOs
# ============================================================================


class UserProfile(BaseModel):
    """Safe account projection - never carries secrets"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    roles: List[str]
    two_factor_enabled: bool = Field(default=False, alias="isTwoFactorEnabled")

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            roles=list(user.roles),
            two_factor_enabled=user.two_factor_enabled,
        )


class AuthenticatedResponse(BaseModel):
    """Tokens for a freshly issued or rotated session"""

    access_token: str
    refresh_token: str
    session_id: str
    user: UserProfile


class TwoFactorChallenge(BaseModel):
    """Login paused until a second-factor code is presented"""

    model_config = ConfigDict(populate_by_name=True)

    requires_2fa: bool = Field(default=True, alias="requires2FA")
    temp_token: str = Field(alias="tempToken")
    message: str = "Enter your two-factor authentication code"


class CurrentUser(BaseModel):
    """Authenticated caller resolved from the access token"""

    id: str
    username: str
    roles: List[str]


class MessageResponse(BaseModel):
    message: str
