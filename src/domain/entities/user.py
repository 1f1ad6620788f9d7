"""
User Entity

Represents an account together with its outstanding password reset request.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from .enums import UserType


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(SQLModel, table=True):
    """
    User entity - an account and its embedded reset-token state.

    Business Rules:
    - Email is unique and stored lowercase (compared case-insensitively)
    - Password stored as bcrypt hash, never plaintext
    - At most one outstanding reset token; only its SHA-256 digest is stored
    - version is bumped on every save (optimistic concurrency)
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    user_type: UserType = Field(default=UserType.user)

    # Password reset request (single active token)
    reset_token_hash: Optional[str] = Field(default=None, index=True, max_length=64)
    reset_token_issued_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    version: int = Field(default=1)

    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )

    def has_reset_token(self) -> bool:
        return self.reset_token_hash is not None and self.reset_token_issued_at is not None

    def clear_reset_token(self) -> None:
        self.reset_token_hash = None
        self.reset_token_issued_at = None
