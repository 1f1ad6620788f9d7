"""
Application Errors

Every error carries a stable machine-readable code and a human-readable
message. The API layer maps them onto HTTP responses.
"""

from typing import Optional


class Error(Exception):
    code = "ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class NotFoundError(Error):
    """Unknown email or user reference"""

    code = "USER_NOT_FOUND"


class InvalidTokenError(Error):
    """Missing, mismatched or already-consumed reset token"""

    code = "INVALID_TOKEN"

    def __init__(self, message: str = "Invalid password reset token", code: Optional[str] = None):
        super().__init__(message, code)


class ExpiredTokenError(Error):
    """Reset token older than the configured TTL"""

    code = "TOKEN_EXPIRED"

    def __init__(
        self, message: str = "Password reset token has expired", code: Optional[str] = None
    ):
        super().__init__(message, code)


class ValidationError(Error):
    """Rejected reset input; INVALID_INPUT for an empty token"""

    code = "INVALID_PASSWORD"


class DispatchError(Error):
    """Notification delivery failed; never fatal for the caller"""

    code = "DISPATCH_FAILED"


class DuplicateUserError(Error):
    code = "USER_ALREADY_EXISTS"


class ConcurrentUpdateError(Error):
    """Record changed since it was read (optimistic concurrency conflict)"""

    code = "CONCURRENT_UPDATE"
