"""
Identity Domain Entities
"""

from .enums import UserType
from .user import User, normalize_email

__all__ = [
    # Enums
    "UserType",
    # Entities
    "User",
    "normalize_email",
]
