"""
Password Reset Handler

Orchestrates the two HTTP-facing halves of the reset flow: requesting a
reset link and performing the reset with the token from that link.
"""

import logging
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode
from uuid import UUID

from src.app.errors import DispatchError, NotFoundError, ValidationError
from src.app.services.clock import Clock
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.services.password_hasher import MAX_PASSWORD_BYTES
from src.app.services.token_consumer import ResetTokenConsumer
from src.app.services.token_issuer import ResetTokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import normalize_email
from .dtos import RetrievePasswordResponse

logger = logging.getLogger(__name__)


def build_reset_url(base_url: str, user_id: UUID, token: str) -> str:
    """<base-url>/setNewPassword?id=<userId>&token=<token>"""
    if not base_url.endswith("/"):
        base_url += "/"
    return f"{base_url}setNewPassword?{urlencode({'id': str(user_id), 'token': token})}"


class ResetHandler:
    """
    Password reset orchestration.

    Business Rules:
    - Email lookup is case-insensitive; unknown email is a client error
    - Notification is dispatched only after the token is committed
    - A failed dispatch is logged and does not undo the issued token
    - Empty tokens, passwords shorter than password_min_length and passwords
      longer than bcrypt accepts are rejected before any token state is read
    - Issuer and consumer default to ones built on the handler's store and
      clock; either can be substituted
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        dispatcher: INotificationDispatcher,
        issuer: Optional[ResetTokenIssuer] = None,
        consumer: Optional[ResetTokenConsumer] = None,
        password_min_length: int = 8,
        reset_token_ttl: timedelta = timedelta(hours=24),
        bcrypt_rounds: int = 12,
    ):
        self.uow = uow
        self.clock = clock
        self.dispatcher = dispatcher
        self.issuer = issuer or ResetTokenIssuer(uow, clock)
        self.consumer = consumer or ResetTokenConsumer(
            uow, clock, ttl=reset_token_ttl, bcrypt_rounds=bcrypt_rounds
        )
        self.password_min_length = password_min_length

    async def request_reset(self, email: str, base_url: str) -> RetrievePasswordResponse:
        """
        Issue a reset token for the account behind email and send the link.

        Raises:
            NotFoundError: no user with that email
        """
        email = normalize_email(email)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError(f"User not found with email: {email}")

            token = await self.issuer.issue(user)

        # Token is committed; delivery happens outside the unit of work
        reset_url = build_reset_url(base_url, user.id, token)

        try:
            await self.dispatcher.send_password_reset(user, reset_url)
        except DispatchError as error:
            logger.warning(f"Password reset mail for user {user.id} not dispatched: {error.message}")

        return RetrievePasswordResponse(message=f"Password reset mail sent to {user.email}")

    async def perform_reset(
        self, token: str, new_password: str, user_id: Optional[UUID] = None
    ) -> None:
        """
        Consume token and set new_password.

        Raises:
            ValidationError: empty token (INVALID_INPUT), password too short
                or too long (INVALID_PASSWORD)
            InvalidTokenError: token unknown, mismatched or already used
            ExpiredTokenError: token older than the TTL
        """
        if not token:
            raise ValidationError("Reset token must not be empty", code="INVALID_INPUT")
        new_password = new_password or ""
        if len(new_password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters long"
            )
        if len(new_password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
            )

        user = await self.consumer.consume(user_id, token, new_password)
        logger.info(f"Password reset completed for user {user.id}")
