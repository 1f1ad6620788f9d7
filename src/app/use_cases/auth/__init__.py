"""
Authentication Use Cases

Password reset and account provisioning business logic.
"""

from .reset_handler import ResetHandler, build_reset_url
from .create_visitor_use_case import CreateVisitorUseCase
from .dtos import RetrievePasswordResponse

__all__ = [
    # Use Cases
    "ResetHandler",
    "CreateVisitorUseCase",
    # Helpers
    "build_reset_url",
    # DTOs - Responses
    "RetrievePasswordResponse",
]
