import threading
from typing import Dict, List, Optional
from uuid import UUID

from src.app.errors import ConcurrentUpdateError, DuplicateUserError
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User, normalize_email


def _copy(user: User) -> User:
    return User(**user.model_dump())


class InMemoryIdentityStore:
    """
    Process-local user table shared by every in-memory unit of work.

    Records are copied on the way in and out, so callers never hold a
    reference to the stored row. All access goes through the lock.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.rows: Dict[UUID, User] = {}


class InMemoryUserRepository(IUserRepository):
    """User repository implementation backed by InMemoryIdentityStore"""

    def __init__(self, store: InMemoryIdentityStore):
        self.store = store

    def _find(self, predicate) -> Optional[User]:
        with self.store.lock:
            for row in self.store.rows.values():
                if predicate(row):
                    return _copy(row)
        return None

    async def get_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        return self._find(lambda row: row.email == email)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        with self.store.lock:
            row = self.store.rows.get(user_id)
            return _copy(row) if row is not None else None

    async def get_by_username(self, username: str) -> Optional[User]:
        return self._find(lambda row: row.username == username)

    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[User]:
        return self._find(lambda row: row.reset_token_hash == token_hash)

    async def list_all(self) -> List[User]:
        with self.store.lock:
            rows = [_copy(row) for row in self.store.rows.values()]
        return sorted(rows, key=lambda row: row.username)

    async def create(self, user: User) -> User:
        user.email = normalize_email(user.email)
        with self.store.lock:
            for row in self.store.rows.values():
                if row.id == user.id or row.email == user.email or row.username == user.username:
                    raise DuplicateUserError(f"User already exists: {user.email}")
            self.store.rows[user.id] = _copy(user)
        return user

    async def save(self, user: User) -> User:
        with self.store.lock:
            row = self.store.rows.get(user.id)
            if row is None or row.version != user.version:
                raise ConcurrentUpdateError(f"User {user.id} was modified concurrently")

            email = normalize_email(user.email)
            for other in self.store.rows.values():
                if other.id != user.id and other.email == email:
                    raise DuplicateUserError(f"User already exists: {email}")

            user.email = email
            user.version += 1
            self.store.rows[user.id] = _copy(user)
        return user
