from typing import Annotated, Sequence

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from accounts.api.v1.deps.core import get_auth_service, get_client_address, get_token_service
from accounts.core.exceptions import http_exceptions
from accounts.core.exceptions.access import (
    InvalidCredentialsError,
    LifetimeExceededError,
    OutOfRangeError,
    RefreshTokenNotFoundError,
    TokenError,
)
from accounts.core.exceptions.domain import DuplicateResourceError, RegistrationDisabledError
from accounts.core.identity import IPAddress
from accounts.core.tokens import TokenService
from accounts.models.refresh_token import RefreshToken
from accounts.models.user import User
from accounts.schemas import (
    Claims,
    NewRefreshToken,
    RefreshTokenListRequest,
    SignJwtRequest,
    Token,
    UserSignup,
)
from accounts.services.auth_service import AuthService

bearer_scheme = HTTPBearer(auto_error=False)

BEARER_HEADERS = {"WWW-Authenticate": "Bearer"}


async def get_optional_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> Claims | None:
    """
    Claims of the bearer token, or None when there is no usable token.
    """
    if credentials is None:
        return None

    try:
        return token_service.decode(credentials.credentials)
    except TokenError:
        return None


async def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> Claims:
    """
    Get the verified claims of the bearer token

    Raises:
        UnauthorizedException: If the token is missing, expired, malformed or badly signed
    """
    if credentials is None:
        raise http_exceptions.UnauthorizedException(
            detail="Not authenticated",
            headers=BEARER_HEADERS,
        )

    try:
        return token_service.decode(credentials.credentials)
    except TokenError as e:
        raise http_exceptions.UnauthorizedException(detail=e.message, headers=BEARER_HEADERS)


async def register_user(
    user_in: UserSignup,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """
    Raises:
        ForbiddenException: If registrations are disabled
        ConflictException: If the username is taken
    """
    try:
        return await auth_service.register_user(user_in)
    except RegistrationDisabledError as e:
        raise http_exceptions.ForbiddenException(detail=e.message)
    except DuplicateResourceError as e:
        raise http_exceptions.ConflictException(detail=e.message)


async def create_refresh_token(
    token_in: NewRefreshToken,
    client_address: Annotated[IPAddress, Depends(get_client_address)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RefreshToken:
    """
    Raises:
        UnauthorizedException: If the username or password is wrong
        BadRequestException: If a requested lifetime is out of range
    """
    try:
        return await auth_service.create_refresh_token(token_in, client_address)
    except InvalidCredentialsError as e:
        # One message whether the user is unknown or the password is wrong
        logger.info(f"Refresh token request rejected for {client_address}")
        raise http_exceptions.UnauthorizedException(detail=e.message, headers=BEARER_HEADERS)
    except OutOfRangeError as e:
        raise http_exceptions.BadRequestException(detail=e.message)


async def list_refresh_tokens(
    list_in: RefreshTokenListRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Sequence[RefreshToken]:
    """
    Raises:
        UnauthorizedException: If the username or password is wrong
    """
    try:
        return await auth_service.list_refresh_tokens(list_in)
    except InvalidCredentialsError as e:
        raise http_exceptions.UnauthorizedException(detail=e.message, headers=BEARER_HEADERS)


async def sign_jwt(
    sign_in: SignJwtRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Token:
    """
    Raises:
        UnauthorizedException: If the refresh token is unknown or expired
        BadRequestException: If the lifetime exceeds the refresh token's maximum
    """
    try:
        access_token = await auth_service.sign_jwt(sign_in)
    except RefreshTokenNotFoundError as e:
        raise http_exceptions.UnauthorizedException(detail=e.message, headers=BEARER_HEADERS)
    except (LifetimeExceededError, OutOfRangeError) as e:
        raise http_exceptions.BadRequestException(detail=e.message)

    return Token(access_token=access_token)
