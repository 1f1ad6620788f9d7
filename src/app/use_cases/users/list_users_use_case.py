from typing import List

from src.app.services.unit_of_work import UnitOfWork
from .dtos import UserSummary


class ListUsersUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> List[UserSummary]:
        async with self.uow:
            users = await self.uow.users.list_all()
            return [UserSummary.from_user(user) for user in users]
