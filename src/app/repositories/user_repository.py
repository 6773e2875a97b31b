from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import User


class DuplicateUserError(Exception):
    """Insert lost a race on a unique column (username or email)"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"User with this {field} already exists")


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """
        Create a new user

        Raises:
            DuplicateUserError: username or email already stored; the
            transaction must be rolled back before it is reused
        """
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass
