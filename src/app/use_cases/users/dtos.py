"""
User Use Case DTOs
"""

from pydantic import BaseModel

from src.domain.entities import User, UserType


class UserSummary(BaseModel):
    """Public view of a user; never carries credentials or token state"""

    id: str
    username: str
    email: str
    user_type: UserType

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            user_type=user.user_type,
        )
