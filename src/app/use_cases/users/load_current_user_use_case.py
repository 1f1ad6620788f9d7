"""
Load Current User Use Case

Resolves the authenticated principal to its user record.
"""

from src.app.errors import NotFoundError
from src.app.services.unit_of_work import UnitOfWork
from .dtos import UserSummary


class LoadCurrentUserUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, username: str) -> UserSummary:
        """
        Args:
            username: Principal name supplied by the transport layer

        Raises:
            NotFoundError: principal has no user record
        """
        async with self.uow:
            user = await self.uow.users.get_by_username(username)
            if user is None:
                raise NotFoundError(f"User not found: {username}")
            return UserSummary.from_user(user)
