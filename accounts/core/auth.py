from typing import TYPE_CHECKING

import anyio
from anyio.to_thread import run_sync
from loguru import logger
from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.argon2 import Argon2Hasher

from accounts.core.config import settings
from accounts.core.exceptions.access import CredentialsNotFoundError, WrongPasswordError

if TYPE_CHECKING:
    from accounts.models import User
    from accounts.repos import UserRepo

# libsodium's argon2id "interactive" limits (2 passes, 64 MiB). This is the floor;
# offline hashing may use stronger parameters but never weaker ones.
ARGON2_TIME_COST = 2
ARGON2_MEMORY_COST = 64 * 1024  # KiB
ARGON2_PARALLELISM = 1


def interactive_password_hash() -> PasswordHash:
    return PasswordHash(
        (
            Argon2Hasher(
                time_cost=ARGON2_TIME_COST,
                memory_cost=ARGON2_MEMORY_COST,
                parallelism=ARGON2_PARALLELISM,
            ),
        )
    )


class CredentialVerifier:
    """
    Hashes and verifies passwords with argon2id.

    Hashing takes tens of milliseconds of CPU, so every call runs in a worker
    thread drawn from a limiter of its own. Password work therefore cannot
    exhaust the default thread pool that the rest of the application
    (sync dependencies, file I/O) relies on.
    """

    def __init__(
        self,
        password_hash: PasswordHash | None = None,
        max_workers: int | None = None,
    ):
        self._password_hash = password_hash or interactive_password_hash()
        self._max_workers = max_workers or settings.password_hash_workers
        self._limiter: anyio.CapacityLimiter | None = None
        self._dummy_hash: str | None = None

    @property
    def limiter(self) -> anyio.CapacityLimiter:
        # Created lazily, a limiter belongs to the event loop it is first used in
        if self._limiter is None:
            self._limiter = anyio.CapacityLimiter(self._max_workers)

        return self._limiter

    async def hash(self, password: str) -> str:
        """
        Hash a password

        Args:
            password: Plain password

        Returns:
            Encoded argon2id hash
        """
        return await run_sync(self._password_hash.hash, password, limiter=self.limiter)

    async def verify(self, stored_hash: str, candidate_password: str) -> None:
        """
        Verify a password against a stored hash

        Args:
            stored_hash: Encoded hash from the user record
            candidate_password: Plain password to check

        Raises:
            WrongPasswordError: If the password does not match
        """
        try:
            matches = await run_sync(
                self._password_hash.verify,
                candidate_password,
                stored_hash,
                limiter=self.limiter,
            )
        except UnknownHashError as e:
            logger.warning("Stored password hash is not in a recognized format")
            raise WrongPasswordError(exception=e)

        if not matches:
            raise WrongPasswordError()

    async def from_credentials(self, user_repo: "UserRepo", username: str, password: str) -> "User":
        """
        Find a user by username and check the password.

        An unknown username still costs one hash verification, so response
        times do not reveal which usernames exist.

        Args:
            user_repo: Repository to look the user up in
            username: Username to look up
            password: Plain password

        Returns:
            User: The authenticated user

        Raises:
            CredentialsNotFoundError: If no user has that username
            WrongPasswordError: If the password is wrong
        """
        user = await user_repo.get_by_username(username=username)

        if user is None:
            if self._dummy_hash is None:
                self._dummy_hash = await self.hash("dummy_password_for_timing_attack_prevention")

            try:
                await self.verify(self._dummy_hash, password)
            except WrongPasswordError:
                pass

            raise CredentialsNotFoundError()

        await self.verify(user.password_hash, password)

        return user
