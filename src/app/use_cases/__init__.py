"""
Use Cases

Organized into domain folders:
- auth/: Password reset and account provisioning
- users/: User lookup
"""

from .auth import (
    ResetHandler,
    CreateVisitorUseCase,
)
from .users import (
    LoadCurrentUserUseCase,
    ListUsersUseCase,
)

__all__ = [
    # Auth
    "ResetHandler",
    "CreateVisitorUseCase",
    # Users
    "LoadCurrentUserUseCase",
    "ListUsersUseCase",
]
