from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from accounts import repos
from accounts.core.auth import CredentialVerifier
from accounts.core.db import get_session
from accounts.core.exceptions import http_exceptions
from accounts.core.exceptions.access import (
    ClientAddressMalformedError,
    ClientAddressUnavailableError,
)
from accounts.core.identity import IPAddress, client_address_from_request
from accounts.core.tokens import TokenService
from accounts.services.auth_service import AuthService
from accounts.services.cache.rate_limiter import RateLimiter
from accounts.services.refresh_tokens import RefreshTokenLedger

# Shared objects are built once in the application lifespan and kept on app.state


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_credential_verifier(request: Request) -> CredentialVerifier:
    return request.app.state.credential_verifier


def get_user_repo(db: Annotated[AsyncSession, Depends(get_session)]) -> repos.UserRepo:
    return repos.UserRepo(db)


def get_refresh_token_repo(
    db: Annotated[AsyncSession, Depends(get_session)],
) -> repos.RefreshTokenRepo:
    return repos.RefreshTokenRepo(db)


def get_refresh_token_ledger(
    refresh_token_repo: Annotated[repos.RefreshTokenRepo, Depends(get_refresh_token_repo)],
    user_repo: Annotated[repos.UserRepo, Depends(get_user_repo)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> RefreshTokenLedger:
    return RefreshTokenLedger(refresh_token_repo, user_repo, token_service)


def get_auth_service(
    user_repo: Annotated[repos.UserRepo, Depends(get_user_repo)],
    ledger: Annotated[RefreshTokenLedger, Depends(get_refresh_token_ledger)],
    verifier: Annotated[CredentialVerifier, Depends(get_credential_verifier)],
) -> AuthService:
    return AuthService(user_repo, ledger, verifier)


def get_client_address(request: Request) -> IPAddress:
    """
    Resolve the caller's address

    Raises:
        BadRequestException: If the forwarded header is malformed or no address is known
    """
    try:
        return client_address_from_request(request)
    except (ClientAddressMalformedError, ClientAddressUnavailableError) as e:
        raise http_exceptions.BadRequestException(detail=e.message)
