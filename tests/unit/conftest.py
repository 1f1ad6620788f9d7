import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from src.adapter.repositories.in_memory_user_repository import (
    InMemoryIdentityStore,
    InMemoryUserRepository,
)
from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from tests.fixtures.clock import FrozenClock
from tests.fixtures.seed import build_user


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def store():
    return InMemoryIdentityStore()


@pytest.fixture
def uow(store):
    return InMemoryUnitOfWork(store)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest_asyncio.fixture
async def alice(store):
    return await InMemoryUserRepository(store).create(build_user("alice"))
