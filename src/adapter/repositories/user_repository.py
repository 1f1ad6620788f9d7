from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.errors import ConcurrentUpdateError, DuplicateUserError
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User, normalize_email


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        stmt = select(User).where(func.lower(User.email) == normalize_email(email))
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        stmt = select(User).where(User.username == username)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[User]:
        """Get user holding the given password reset token digest"""
        stmt = select(User).where(User.reset_token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_all(self) -> List[User]:
        """List every user"""
        stmt = select(User).order_by(User.username)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, user: User) -> User:
        """Create a new user"""
        user.email = normalize_email(user.email)
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateUserError(f"User already exists: {user.email}")
        await self.session.refresh(user)
        return user

    async def save(self, user: User) -> User:
        """Compare-and-swap update of the whole record on its version"""
        expected_version = user.version
        stmt = (
            update(User)
            .where(User.id == user.id, User.version == expected_version)
            .values(
                username=user.username,
                email=normalize_email(user.email),
                password_hash=user.password_hash,
                user_type=user.user_type,
                reset_token_hash=user.reset_token_hash,
                reset_token_issued_at=user.reset_token_issued_at,
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.exec(stmt)
        if result.rowcount != 1:
            raise ConcurrentUpdateError(f"User {user.id} was modified concurrently")

        user.version = expected_version + 1
        return user
