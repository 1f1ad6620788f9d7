"""
Authentication Use Case DTOs (Data Transfer Objects)

Response classes for the auth domain.
"""

from pydantic import BaseModel


class RetrievePasswordResponse(BaseModel):
    """Response for password reset request"""

    message: str
