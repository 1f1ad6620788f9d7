from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Clock(ABC):
    """Source of the current time for token expiry checks"""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a naive UTC datetime (the format the store persists)"""
        pass


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)
