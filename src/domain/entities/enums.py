"""
Identity Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserType(str, Enum):
    """User classification"""

    admin = "admin"
    user = "user"
    visitor = "visitor"
