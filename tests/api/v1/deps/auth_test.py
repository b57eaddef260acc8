import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from accounts.api.v1.deps.auth import (
    create_refresh_token,
    get_current_claims,
    get_optional_claims,
    sign_jwt,
)
from accounts.core.exceptions.access import (
    CredentialsNotFoundError,
    LifetimeExceededError,
    RefreshTokenNotFoundError,
    WrongPasswordError,
)
from accounts.core.exceptions.http_exceptions import (
    BadRequestException,
    UnauthorizedException,
)
from accounts.core.tokens import TokenService
from accounts.schemas import Claims, ClaimsUser, NewRefreshToken, SignJwtRequest
from accounts.services.auth_service import AuthService


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.fixture
def signed_token(token_service: TokenService) -> str:
    now = int(datetime.now(UTC).timestamp())
    claims = Claims(
        user=ClaimsUser(id=uuid.uuid4(), username="someone"),
        parent_token=uuid.uuid4(),
        iat=now,
        exp=now + 60,
    )

    return token_service.encode(claims)


@pytest.mark.anyio
class TestClaimsDependencies:
    """Test reading claims from the bearer token."""

    async def test_current_claims(self, token_service: TokenService, signed_token: str):
        """Test that a valid token yields its claims."""
        claims = await get_current_claims(bearer(signed_token), token_service)

        assert claims.user.username == "someone"

    async def test_current_claims_missing(self, token_service: TokenService):
        """Test that a missing token is rejected."""
        with pytest.raises(UnauthorizedException) as exc_info:
            await get_current_claims(None, token_service)

        assert exc_info.value.detail == "Not authenticated"
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    async def test_current_claims_invalid(self, token_service: TokenService):
        """Test that a garbage token is rejected."""
        with pytest.raises(UnauthorizedException):
            await get_current_claims(bearer("invalid.token.here"), token_service)

    async def test_optional_claims(self, token_service: TokenService, signed_token: str):
        """Test that optional claims are None for missing or bad tokens."""
        assert await get_optional_claims(None, token_service) is None
        assert await get_optional_claims(bearer("garbage"), token_service) is None
        assert (await get_optional_claims(bearer(signed_token), token_service)) is not None


@pytest.mark.anyio
class TestCredentialErrors:
    """Test that credential failures look the same to clients."""

    @pytest.mark.parametrize("error", [CredentialsNotFoundError(), WrongPasswordError()])
    async def test_same_detail_for_unknown_user_and_wrong_password(self, error):
        """Test that both failures give one 401 message."""
        auth_service = MagicMock(spec=AuthService)
        auth_service.create_refresh_token = AsyncMock(side_effect=error)
        request = NewRefreshToken(username="someone", password="whatever")

        with pytest.raises(UnauthorizedException) as exc_info:
            await create_refresh_token(request, "127.0.0.1", auth_service)

        assert exc_info.value.detail == "Incorrect username or password"


@pytest.mark.anyio
class TestSignJwt:
    """Test the JWT signing dependency."""

    async def test_unknown_refresh_token(self):
        """Test that an unknown refresh token gives 401."""
        auth_service = MagicMock(spec=AuthService)
        auth_service.sign_jwt = AsyncMock(side_effect=RefreshTokenNotFoundError())

        with pytest.raises(UnauthorizedException):
            await sign_jwt(SignJwtRequest(refresh_token="x"), auth_service)

    async def test_lifetime_exceeded(self):
        """Test that a lifetime above the maximum gives 400 with the limit."""
        auth_service = MagicMock(spec=AuthService)
        auth_service.sign_jwt = AsyncMock(side_effect=LifetimeExceededError(300))

        with pytest.raises(BadRequestException) as exc_info:
            await sign_jwt(SignJwtRequest(refresh_token="x", lifetime=301), auth_service)

        assert exc_info.value.detail == "Requested JWT lifetime exceeds the limit of 300."

    async def test_returns_bearer_token(self):
        auth_service = MagicMock(spec=AuthService)
        auth_service.sign_jwt = AsyncMock(return_value="header.payload.signature")

        token = await sign_jwt(SignJwtRequest(refresh_token="x"), auth_service)

        assert token.access_token == "header.payload.signature"
        assert str(token) == "Bearer header.payload.signature"
