from typing import Annotated

from fastapi import APIRouter, Depends, status

from accounts import repos
from accounts.api.v1.deps.auth import BEARER_HEADERS, get_current_claims
from accounts.api.v1.deps.core import get_user_repo
from accounts.api.v1.deps.rate_limit import rate_limit_general
from accounts.core import responses
from accounts.core.exceptions import http_exceptions
from accounts.schemas import Claims, UserResponse

router = APIRouter()


@router.get(
    "/me",
    response_model=UserResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": responses.UnauthorizedResponse},
        **responses.RATE_LIMITED_RESPONSES,
    },
    dependencies=[Depends(rate_limit_general)],
    summary="Read current user",
    description="Get the details of the user the bearer JWT was issued to.",
)
async def read_user_me(
    claims: Annotated[Claims, Depends(get_current_claims)],
    user_repo: Annotated[repos.UserRepo, Depends(get_user_repo)],
):
    user = await user_repo.get_by_id(claims.user.id)

    if user is None:
        raise http_exceptions.UnauthorizedException(
            detail="User no longer exists",
            headers=BEARER_HEADERS,
        )

    return user
