from abc import ABC, abstractmethod

from src.domain.entities import User


class INotificationDispatcher(ABC):
    """Out-of-band delivery of password reset links"""

    @abstractmethod
    async def send_password_reset(self, user: User, reset_url: str) -> None:
        """
        Deliver the reset link to the user.

        Raises:
            DispatchError: delivery could not be handed off
        """
        pass
