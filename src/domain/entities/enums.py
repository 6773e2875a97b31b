"""
Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User account status"""

    active = "active"
    disabled = "disabled"


class Role(str, Enum):
    """Role tags attached to every issued token"""

    user = "user"
    inspector = "inspector"
    admin = "admin"
    super_admin = "super_admin"


class TokenType(str, Enum):
    """Bearer token classes, each signed with its own secret"""

    access = "access"
    refresh = "refresh"
    temp_2fa = "temp_2fa"
