from typing import Sequence

from loguru import logger

from accounts.core.auth import CredentialVerifier
from accounts.core.config import settings
from accounts.core.exceptions.domain import (
    DuplicateResourceError,
    RegistrationDisabledError,
)
from accounts.core.identity import IPAddress
from accounts.models.refresh_token import RefreshToken
from accounts.models.user import User
from accounts.repos.user import UserRepo
from accounts.schemas import (
    NewRefreshToken,
    RefreshTokenListRequest,
    SignJwtRequest,
    UserCreate,
    UserSignup,
)
from accounts.services.refresh_tokens import RefreshTokenLedger


class AuthService:
    """
    Account operations exposed over the API: registration, refresh token
    issuance and JWT signing.

    Receives its repositories and collaborators via constructor and never
    sees database sessions. Raises domain exceptions which are caught and
    translated to HTTP exceptions by the deps layer.
    """

    def __init__(
        self,
        user_repo: UserRepo,
        ledger: RefreshTokenLedger,
        verifier: CredentialVerifier,
    ):
        self.user_repo = user_repo
        self.ledger = ledger
        self.verifier = verifier

    async def register_user(self, signup_data: UserSignup) -> User:
        """
        Register a new user.

        Raises:
            RegistrationDisabledError: If registrations are turned off.
            DuplicateResourceError: If the username is taken.
        """
        if not settings.allow_registrations:
            raise RegistrationDisabledError()

        existing = await self.user_repo.get_by_username(username=signup_data.username)
        if existing:
            raise DuplicateResourceError("Username is already taken.")

        password_hash = await self.verifier.hash(signup_data.password.get_secret_value())
        user = await self.user_repo.create_one(
            schema=UserCreate(
                username=signup_data.username,
                email=signup_data.email,
                display_name=signup_data.display_name,
                password_hash=password_hash,
            ),
        )
        logger.info(f"User {user.id} registered")

        return user

    async def create_refresh_token(
        self, request: NewRefreshToken, client_address: IPAddress
    ) -> RefreshToken:
        """
        Check the user's credentials and issue a refresh token.

        Raises:
            InvalidCredentialsError: If the username or password is wrong.
            OutOfRangeError: If a requested lifetime is outside the allowed bounds.
        """
        user = await self.verifier.from_credentials(
            self.user_repo, request.username, request.password.get_secret_value()
        )

        return await self.ledger.create(
            user_id=user.id,
            client_address=client_address,
            requested_lifetime=request.expires_in_seconds,
            max_jwt_lifetime=request.max_jwt_lifetime,
        )

    async def list_refresh_tokens(self, request: RefreshTokenListRequest) -> Sequence[RefreshToken]:
        """
        Raises:
            InvalidCredentialsError: If the username or password is wrong.
        """
        user = await self.verifier.from_credentials(
            self.user_repo, request.username, request.password.get_secret_value()
        )

        return await self.ledger.list_for_user(user.id, valid=request.valid)

    async def sign_jwt(self, request: SignJwtRequest) -> str:
        return await self.ledger.mint_jwt(request.refresh_token, request.lifetime)
