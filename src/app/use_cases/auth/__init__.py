"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase
from .verify_two_factor_use_case import VerifyTwoFactorUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .inspector_login_use_case import InspectorLoginUseCase
from .get_profile_use_case import GetProfileUseCase
from .session_issuer import SessionIssuer
from .dtos import (
    AuthenticatedResponse,
    ClientInfo,
    CurrentUser,
    MessageResponse,
    RegisterCommand,
    TwoFactorChallenge,
    UserProfile,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "VerifyTwoFactorUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "InspectorLoginUseCase",
    "GetProfileUseCase",
    "SessionIssuer",
    # DTOs - Commands
    "ClientInfo",
    "RegisterCommand",
    # DTOs - Responses
    "AuthenticatedResponse",
    "CurrentUser",
    "MessageResponse",
    "TwoFactorChallenge",
    "UserProfile",
]
