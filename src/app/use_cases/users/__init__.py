"""
User Management Use Cases

All user-related business logic.
"""

from .load_current_user_use_case import LoadCurrentUserUseCase
from .list_users_use_case import ListUsersUseCase
from .dtos import UserSummary

__all__ = [
    "LoadCurrentUserUseCase",
    "ListUsersUseCase",
    "UserSummary",
]
