from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        pass

    @abstractmethod
    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[User]:
        """Get user holding the given password reset token digest"""
        pass

    @abstractmethod
    async def list_all(self) -> List[User]:
        """List every user"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """
        Create a new user

        Raises:
            DuplicateUserError: email or username already taken
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """
        Write the whole record if it is still at user.version.

        Password and reset-token fields are written together. On success
        user.version is advanced.

        Raises:
            ConcurrentUpdateError: record changed since it was read, or is gone
        """
        pass
