"""
Create Visitor Use Case

Provisions a throwaway visitor account identified by a random UUID.
"""

import uuid

from src.app.services.password_hasher import hash_password
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User, UserType


class CreateVisitorUseCase:
    """
    Use case for creating a visitor account.

    Business Rules:
    - Username and password are the same random UUID
    - Email is <uuid>@gmail.com
    - Account type is visitor
    """

    def __init__(self, uow: UnitOfWork, bcrypt_rounds: int = 12):
        self.uow = uow
        self.bcrypt_rounds = bcrypt_rounds

    async def execute(self) -> str:
        """
        Returns:
            The generated UUID (username and password of the new account)
        """
        visitor_id = str(uuid.uuid4())
        password_hash = await hash_password(visitor_id, self.bcrypt_rounds)

        async with self.uow:
            user = User(
                username=visitor_id,
                email=f"{visitor_id}@gmail.com",
                password_hash=password_hash,
                user_type=UserType.visitor,
            )
            await self.uow.users.create(user)
            await self.uow.commit()

        return visitor_id
