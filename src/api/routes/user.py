from typing import List

from fastapi import APIRouter, Depends, status

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import ListUsersUseCase, UserSummary
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(tags=["User"])


async def list_users(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Users

    Returns a summary of every user. Requires an authenticated principal.
    """
    return await ListUsersUseCase(uow).execute()


# method, path, endpoint, route options
ROUTES = [
    ("GET", "/users", list_users, {"response_model": List[UserSummary]}),
]

for method, path, endpoint, options in ROUTES:
    router.add_api_route(
        path, endpoint, methods=[method], status_code=status.HTTP_200_OK, **options
    )
