"""
Password Reset Token Consumer

Validates a presented reset token and, exactly once, swaps it for a new
password.
"""

import hmac
import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from src.app.errors import ConcurrentUpdateError, ExpiredTokenError, InvalidTokenError
from src.app.services.clock import Clock
from src.app.services.password_hasher import hash_password
from src.app.services.token_issuer import hash_reset_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User

logger = logging.getLogger(__name__)


class ResetTokenConsumer:
    """
    Consumes password reset tokens.

    Business Rules:
    - Unknown user, no outstanding token and mismatched token all fail the
      same way (INVALID_TOKEN), so account existence is not revealed
    - Digests are compared in constant time
    - A token older than the TTL fails with TOKEN_EXPIRED and is cleared
    - On success the new bcrypt hash is written and the token cleared in a
      single compare-and-swap update; losing that race is INVALID_TOKEN
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        ttl: timedelta = timedelta(hours=24),
        bcrypt_rounds: int = 12,
    ):
        self.uow = uow
        self.clock = clock
        self.ttl = ttl
        self.bcrypt_rounds = bcrypt_rounds

    async def consume(
        self, user_id: Optional[UUID], token: str, new_password: str
    ) -> User:
        """
        Validate token for the referenced user and apply new_password.

        Args:
            user_id: User the token was issued to; when None the user is
                resolved from the token itself
            token: Raw token from the reset link
            new_password: Plain text password to set

        Returns:
            The updated user

        Raises:
            InvalidTokenError: no such user/token, mismatch, or already consumed
            ExpiredTokenError: token older than the TTL
        """
        presented_hash = hash_reset_token(token)

        async with self.uow:
            if user_id is not None:
                user = await self.uow.users.get_by_id(user_id)
            else:
                user = await self.uow.users.get_by_reset_token_hash(presented_hash)

            if user is None or not user.has_reset_token():
                raise InvalidTokenError()

            if not hmac.compare_digest(user.reset_token_hash, presented_hash):
                raise InvalidTokenError()

            if self.clock.now() - user.reset_token_issued_at > self.ttl:
                user.clear_reset_token()
                try:
                    await self.uow.users.save(user)
                    await self.uow.commit()
                except ConcurrentUpdateError:
                    logger.info(f"Expired reset token for user {user.id} already replaced")
                raise ExpiredTokenError()

            user.password_hash = await hash_password(new_password, self.bcrypt_rounds)
            user.clear_reset_token()

            try:
                await self.uow.users.save(user)
            except ConcurrentUpdateError:
                raise InvalidTokenError()
            await self.uow.commit()

            return user
