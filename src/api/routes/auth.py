import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.app.errors import (
    DuplicateUserError,
    Error,
    ExpiredTokenError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    CreateVisitorUseCase,
    ResetHandler,
    RetrievePasswordResponse,
)
from src.app.use_cases.users import LoadCurrentUserUseCase, UserSummary
from src.depends import get_current_user, get_reset_handler, get_unit_of_work

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def request_base_url(request: Request) -> str:
    """scheme://host[:port]/<root_path>/ of the inbound request, unless configured"""
    if ApplicationConfig.RESET_BASE_URL:
        return ApplicationConfig.RESET_BASE_URL
    return str(request.base_url)


async def get_me(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current User

    Resolves the authenticated principal to its user summary.

    Raises:
        - 401/403: Missing or invalid bearer token
        - 404 Not Found: Principal has no user record
    """
    logger.info("Request to get information of logged in user")
    try:
        return await LoadCurrentUserUseCase(uow).execute(current_user["username"])
    except NotFoundError as error:
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)


async def make_uuid(uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Create Visitor

    Creates a visitor account whose username and password are a random UUID
    and returns that UUID.
    """
    logger.info("Request to generate a visitor account")
    use_case = CreateVisitorUseCase(uow, bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS)
    try:
        return await use_case.execute()
    except DuplicateUserError as error:
        raise ServerError(error)


class RetrievePasswordRequest(BaseModel):
    """
    Request password reset HTTP request payload
    """

    email: EmailStr = Field(..., description="User email address")


async def retrieve_password(
    body: RetrievePasswordRequest,
    request: Request,
    handler: ResetHandler = Depends(get_reset_handler),
):
    """
    Request Password Reset

    Issues a single-use reset token for the account and mails
    <base-url>/setNewPassword?id=<userId>&token=<token>.

    Raises:
        - 400 Bad Request: No user with that email
        - 422 Unprocessable Entity: Malformed email
    """
    logger.info(f"Request to send password reset mail to {body.email}")
    try:
        return await handler.request_reset(body.email, request_base_url(request))
    except NotFoundError as error:
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    except Error as error:
        raise ServerError(error)


class ResetPasswordRequest(BaseModel):
    """
    Reset password HTTP request payload

    id is optional: without it the user is resolved from the token.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., description="Password reset token from the mailed link")
    new_password: str = Field(..., alias="newPassword", description="New password")
    user_id: Optional[UUID] = Field(None, alias="id", description="User id from the mailed link")


async def reset_password(
    body: ResetPasswordRequest,
    handler: ResetHandler = Depends(get_reset_handler),
):
    """
    Perform Password Reset

    Validates the token, sets the new password and invalidates the token.

    Raises:
        - 400 Bad Request: Invalid, consumed or expired token; rejected password
    """
    logger.info("Request to validate token and reset password")
    try:
        await handler.perform_reset(body.token, body.new_password, user_id=body.user_id)
    except (InvalidTokenError, ExpiredTokenError, ValidationError) as error:
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    except Error as error:
        raise ServerError(error)

    return Response(status_code=status.HTTP_200_OK)


# method, path, endpoint, route options
ROUTES = [
    ("GET", "/me", get_me, {"response_model": UserSummary}),
    ("GET", "/makeUuid", make_uuid, {"response_model": str}),
    ("POST", "/retrievePwd", retrieve_password, {"response_model": RetrievePasswordResponse}),
    ("POST", "/resetPwd", reset_password, {"response_class": Response}),
]

for method, path, endpoint, options in ROUTES:
    router.add_api_route(
        path, endpoint, methods=[method], status_code=status.HTTP_200_OK, **options
    )
