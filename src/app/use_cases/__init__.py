"""
Use Cases

Organized into domain folders:
- auth/: Login, 2FA verification, refresh, logout, inspector login
- two_factor/: TOTP enrollment
- sessions/: Session maintenance
"""

# Re-export for callers that import from the package root
from .auth import (
    RegisterUseCase,
    LoginUseCase,
    VerifyTwoFactorUseCase,
    RefreshTokenUseCase,
    LogoutUseCase,
    InspectorLoginUseCase,
    GetProfileUseCase,
)
from .two_factor import (
    SetupTwoFactorUseCase,
    EnableTwoFactorUseCase,
    DisableTwoFactorUseCase,
)
from .sessions import (
    CleanupSessionsUseCase,
)

__all__ = [
    # Auth
    "RegisterUseCase",
    "LoginUseCase",
    "VerifyTwoFactorUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "InspectorLoginUseCase",
    "GetProfileUseCase",
    # Two-factor
    "SetupTwoFactorUseCase",
    "EnableTwoFactorUseCase",
    "DisableTwoFactorUseCase",
    # Sessions
    "CleanupSessionsUseCase",
]
