from src.adapter.repositories.in_memory_user_repository import (
    InMemoryIdentityStore,
    InMemoryUserRepository,
)
from src.app.services.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """
    In-memory implementation of UnitOfWork pattern.

    Each repository write is applied atomically to the shared store when it
    is made, so commit and rollback have nothing left to do.
    """

    def __init__(self, store: InMemoryIdentityStore):
        self.store = store
        self.committed = False

    async def __aenter__(self):
        self.users = InMemoryUserRepository(self.store)
        self.committed = False
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        self.committed = True

    async def rollback(self):
        pass
