from typing import Annotated, Sequence

from fastapi import APIRouter, Depends, status

from accounts.api.v1.deps.auth import (
    create_refresh_token,
    list_refresh_tokens,
    register_user,
    sign_jwt,
)
from accounts.api.v1.deps.core import get_token_service
from accounts.api.v1.deps.rate_limit import (
    rate_limit_general,
    rate_limit_login,
    rate_limit_register,
)
from accounts.core import responses
from accounts.core.tokens import TokenService
from accounts.models import RefreshToken, User
from accounts.schemas import (
    PublicKeyResponse,
    RefreshTokenResponse,
    RefreshTokenSummary,
    Token,
    TokenValidationRequest,
    TokenValidationResponse,
    UserResponse,
)

router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_403_FORBIDDEN: {"model": responses.ForbiddenResponse},
        status.HTTP_409_CONFLICT: {"model": responses.ConflictResponse},
        **responses.RATE_LIMITED_RESPONSES,
    },
    dependencies=[Depends(rate_limit_register)],
    summary="Register",
    description="Create a new user account.",
)
async def register(user: Annotated[User, Depends(register_user)]):
    return user


@router.post(
    "/refresh-tokens",
    response_model=RefreshTokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": responses.BadRequestResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": responses.UnauthorizedResponse},
        **responses.RATE_LIMITED_RESPONSES,
    },
    dependencies=[Depends(rate_limit_login)],
    summary="Create refresh token",
    description="Check the user's credentials and issue a refresh token.",
)
async def new_refresh_token(
    refresh_token: Annotated[RefreshToken, Depends(create_refresh_token)],
):
    return refresh_token


@router.post(
    "/refresh-tokens/list",
    response_model=list[RefreshTokenSummary],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": responses.UnauthorizedResponse},
        **responses.RATE_LIMITED_RESPONSES,
    },
    dependencies=[Depends(rate_limit_login)],
    summary="List refresh tokens",
    description="List the user's valid refresh tokens (or all of them with valid=false), oldest first.",
)
async def get_refresh_tokens(
    refresh_tokens: Annotated[Sequence[RefreshToken], Depends(list_refresh_tokens)],
):
    return refresh_tokens


@router.post(
    "/jwt",
    response_model=Token,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": responses.BadRequestResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": responses.UnauthorizedResponse},
        **responses.RATE_LIMITED_RESPONSES,
    },
    dependencies=[Depends(rate_limit_general)],
    summary="Sign JWT",
    description="Sign a JWT with a refresh token.",
)
async def new_jwt(token: Annotated[Token, Depends(sign_jwt)]):
    return token


@router.get(
    "/jwt/public-key",
    response_model=PublicKeyResponse,
    responses={**responses.RATE_LIMITED_RESPONSES},
    dependencies=[Depends(rate_limit_general)],
    summary="JWT public key",
    description="Public key for verifying JWTs without calling this API.",
)
async def jwt_public_key(token_service: Annotated[TokenService, Depends(get_token_service)]):
    return PublicKeyResponse(
        algorithm=token_service.algorithm,
        public_key=token_service.public_key_pem.decode(),
    )


@router.post(
    "/jwt/validate",
    response_model=TokenValidationResponse,
    responses={**responses.RATE_LIMITED_RESPONSES},
    dependencies=[Depends(rate_limit_general)],
    summary="Validate JWT",
)
async def validate_jwt(
    token_in: TokenValidationRequest,
    token_service: Annotated[TokenService, Depends(get_token_service)],
):
    return TokenValidationResponse(valid=token_service.is_valid(token_in.token))
