import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Sequence

from loguru import logger

from accounts.core.config import settings
from accounts.core.constants import REFRESH_TOKEN_ALPHABET, REFRESH_TOKEN_LENGTH
from accounts.core.exceptions.access import (
    LifetimeExceededError,
    OutOfRangeError,
    RefreshTokenNotFoundError,
)
from accounts.core.identity import IPAddress
from accounts.core.tokens import TokenService
from accounts.models.refresh_token import RefreshToken
from accounts.repos.refresh_token import RefreshTokenRepo
from accounts.repos.user import UserRepo
from accounts.schemas import Claims, ClaimsUser, RefreshTokenCreate


def generate_token_string(length: int = REFRESH_TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(REFRESH_TOKEN_ALPHABET) for _ in range(length))


def _check_range(name: str, value: int, minimum: int, maximum: int) -> None:
    if not minimum <= value <= maximum:
        raise OutOfRangeError(f"{name} must be between {minimum} and {maximum} seconds.")


class RefreshTokenLedger:
    """
    Issues refresh tokens and signs JWTs from them.

    A refresh token is valid until its `expires` timestamp and caps the
    lifetime of every JWT signed from it at its `max_jwt_lifetime`. Rows are
    never updated here, so an expired token simply stops being found.
    """

    def __init__(
        self,
        refresh_token_repo: RefreshTokenRepo,
        user_repo: UserRepo,
        token_service: TokenService,
    ):
        self.refresh_token_repo = refresh_token_repo
        self.user_repo = user_repo
        self.token_service = token_service

    async def create(
        self,
        user_id: uuid.UUID,
        client_address: IPAddress,
        requested_lifetime: int,
        max_jwt_lifetime: int,
    ) -> RefreshToken:
        """
        Create a refresh token for a user.

        Args:
            user_id: Owner of the token
            client_address: Address the request came from
            requested_lifetime: Seconds from now the token is valid for
            max_jwt_lifetime: Longest lifetime of JWTs signed with the token, in seconds

        Returns:
            RefreshToken: The stored token

        Raises:
            OutOfRangeError: If a lifetime is outside the allowed bounds
        """
        _check_range(
            "expires_in_seconds",
            requested_lifetime,
            settings.refresh_token_min_lifetime,
            settings.refresh_token_max_lifetime,
        )
        _check_range(
            "max_jwt_lifetime",
            max_jwt_lifetime,
            settings.jwt_lifetime_min,
            settings.jwt_lifetime_max,
        )

        refresh_token = await self.refresh_token_repo.create_one(
            schema=RefreshTokenCreate(
                token_string=generate_token_string(),
                expires=datetime.now(UTC) + timedelta(seconds=requested_lifetime),
                user_id=user_id,
                client_address=str(client_address),
                max_jwt_lifetime=max_jwt_lifetime,
            ),
        )
        logger.info(f"Refresh token {refresh_token.id} created for user {user_id}")

        return refresh_token

    async def get_valid(self, token_string: str) -> RefreshToken:
        """
        Raises:
            RefreshTokenNotFoundError: If no unexpired token has that string
        """
        refresh_token = await self.refresh_token_repo.get_valid_by_token_string(token_string)

        if refresh_token is None:
            raise RefreshTokenNotFoundError()

        return refresh_token

    async def mint_jwt(self, token_string: str, requested_jwt_lifetime: int) -> str:
        """
        Sign a JWT for the owner of a refresh token.

        Args:
            token_string: Secret string of the refresh token
            requested_jwt_lifetime: Seconds the JWT is valid for

        Returns:
            str: Signed JWT whose `exp - iat` equals the requested lifetime

        Raises:
            OutOfRangeError: If the lifetime is not positive
            RefreshTokenNotFoundError: If the refresh token is unknown, expired
                or its user is gone
            LifetimeExceededError: If the lifetime is above the token's maximum
        """
        if requested_jwt_lifetime <= 0:
            raise OutOfRangeError("lifetime must be a positive number of seconds.")

        refresh_token = await self.get_valid(token_string)

        if requested_jwt_lifetime > refresh_token.max_jwt_lifetime:
            raise LifetimeExceededError(refresh_token.max_jwt_lifetime)

        user = await self.user_repo.get_by_id(refresh_token.user_id)

        if user is None:
            logger.warning(f"Refresh token {refresh_token.id} belongs to a missing user")
            raise RefreshTokenNotFoundError()

        issued_at = int(datetime.now(UTC).timestamp())
        claims = Claims(
            user=ClaimsUser.model_validate(user),
            parent_token=refresh_token.id,
            iat=issued_at,
            exp=issued_at + requested_jwt_lifetime,
        )

        return self.token_service.encode(claims)

    async def list_for_user(self, user_id: uuid.UUID, valid: bool = True) -> Sequence[RefreshToken]:
        """List a user's unexpired tokens, or all of them with valid=False"""
        return await self.refresh_token_repo.list_for_user(user_id, valid=valid)
