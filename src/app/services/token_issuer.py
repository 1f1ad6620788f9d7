"""
Password Reset Token Issuer

Generates single-use reset tokens and binds them to a user record.
"""

import hashlib
import logging
import secrets
from uuid import UUID

from src.app.errors import ConcurrentUpdateError, NotFoundError
from src.app.services.clock import Clock
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User

logger = logging.getLogger(__name__)

# 32 random bytes = 256 bits of entropy, ~43 url-safe characters
TOKEN_BYTES = 32


def generate_reset_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_reset_token(token: str) -> str:
    """SHA-256 hex digest; the only form of the token that is persisted"""
    return hashlib.sha256(token.encode()).hexdigest()


class ResetTokenIssuer:
    """
    Issues password reset tokens.

    Business Rules:
    - Token comes from a CSPRNG with at least 128 bits of entropy
    - Only the SHA-256 digest and the issuance time are stored on the user
    - A new token replaces any outstanding one (single active token)
    - The password is never touched
    - The read-replace sequence is retried when another writer wins the race
    """

    def __init__(self, uow: UnitOfWork, clock: Clock, max_attempts: int = 3):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.uow = uow
        self.clock = clock
        self.max_attempts = max_attempts

    async def issue(self, user: User) -> str:
        """
        Issue a new reset token for user.

        Returns:
            The raw token (to be delivered out-of-band)

        Raises:
            NotFoundError: user no longer exists
            ConcurrentUpdateError: still conflicting after max_attempts
        """
        user_id = user.id
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._issue_once(user_id)
            except ConcurrentUpdateError:
                if attempt == self.max_attempts:
                    raise
                logger.info(
                    f"Reset token issuance for user {user_id} lost a concurrent update, "
                    f"retrying ({attempt}/{self.max_attempts})"
                )

    async def _issue_once(self, user_id: UUID) -> str:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                raise NotFoundError(f"User not found: {user_id}")

            token = generate_reset_token()
            user.reset_token_hash = hash_reset_token(token)
            user.reset_token_issued_at = self.clock.now()

            await self.uow.users.save(user)
            await self.uow.commit()

            return token
