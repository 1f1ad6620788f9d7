import asyncio
import logging
from typing import Set
from uuid import UUID

from src.app.errors import DispatchError
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.domain.entities import User

logger = logging.getLogger(__name__)


class LoggingNotificationDispatcher(INotificationDispatcher):
    """
    Development dispatcher: hands each reset mail to a background task that
    logs the delivery instead of sending it.

    The reset URL carries the raw token and is never written to the log.
    """

    def __init__(self):
        self._pending: Set[asyncio.Task] = set()

    async def send_password_reset(self, user: User, reset_url: str) -> None:
        try:
            task = asyncio.create_task(self._deliver(user.email, user.id))
        except RuntimeError as exc:
            raise DispatchError(f"Could not schedule reset mail: {exc}") from exc
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, to_email: str, user_id: UUID) -> None:
        logger.info(f"[DEV MAIL] password reset link for user {user_id} sent to {to_email}")
