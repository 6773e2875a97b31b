"""
Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import Role, TokenType, UserStatus

# Export all entities
from .user import User
from .session import Session

__all__ = [
    # Enums
    "Role",
    "TokenType",
    "UserStatus",
    # Entities
    "User",
    "Session",
]
