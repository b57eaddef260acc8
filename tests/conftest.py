import uuid
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import pytest
from faker import Faker
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from accounts.api.v1.deps.core import get_refresh_token_repo, get_user_repo
from accounts.core.auth import CredentialVerifier, interactive_password_hash
from accounts.core.keys import KeyMaterialManager
from accounts.core.tokens import TokenService
from accounts.main import app
from accounts.repos import RefreshTokenRepo, UserRepo
from accounts.services.cache.rate_limiter import RateLimiter

DEFAULT_PASSWORD = "correct horse battery staple"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def key_manager() -> KeyMaterialManager:
    """Generate the RSA-4096 key pair once, generation takes seconds."""
    return KeyMaterialManager.generate()


@pytest.fixture(scope="session")
def other_key_manager() -> KeyMaterialManager:
    return KeyMaterialManager.generate()


@pytest.fixture
def token_service(key_manager: KeyMaterialManager) -> TokenService:
    return TokenService(key_manager)


@pytest.fixture
def redis_client() -> fakeredis.FakeAsyncRedis:
    """In-memory Redis, fresh for every test."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())


@pytest.fixture
def rate_limiter(redis_client: fakeredis.FakeAsyncRedis) -> RateLimiter:
    return RateLimiter(redis_client)


@pytest.fixture
def credential_verifier() -> CredentialVerifier:
    return CredentialVerifier(max_workers=2)


@pytest.fixture
def faker() -> Faker:
    """Create a Faker instance for generating test data."""
    return Faker()


@pytest.fixture(scope="session")
def default_password() -> str:
    return DEFAULT_PASSWORD


@pytest.fixture(scope="session")
def pre_hashed_password() -> str:
    """Hash the default password once for all tests, argon2 is slow on purpose."""
    return interactive_password_hash().hash(DEFAULT_PASSWORD)


@pytest.fixture
def user(faker: Faker, pre_hashed_password: str) -> SimpleNamespace:
    """A user record as the repositories return it."""
    now = datetime.now(UTC)

    return SimpleNamespace(
        id=uuid.uuid4(),
        username=faker.pystr(min_chars=8, max_chars=12),
        email=faker.safe_email(),
        display_name=faker.name()[:50],
        password_hash=pre_hashed_password,
        groups=["users"],
        created=now,
        modified=now,
    )


@pytest.fixture
def make_refresh_token(user: SimpleNamespace):
    """Build refresh token records owned by `user`."""

    def _make(
        max_jwt_lifetime: int = 300,
        expires_in: int = 3600,
        token_string: str | None = None,
    ) -> SimpleNamespace:
        now = datetime.now(UTC)

        return SimpleNamespace(
            id=uuid.uuid4(),
            token_string=token_string or "a" * 100,
            created=now,
            modified=now,
            expires=now + timedelta(seconds=expires_in),
            user_id=user.id,
            client_address="127.0.0.1",
            max_jwt_lifetime=max_jwt_lifetime,
        )

    return _make


@pytest.fixture
def user_repo(user: SimpleNamespace) -> MagicMock:
    """UserRepo double that knows exactly one user."""
    repo = MagicMock(spec=UserRepo)
    repo.get_by_username = AsyncMock(
        side_effect=lambda username: user if username == user.username else None
    )
    repo.get_by_id = AsyncMock(side_effect=lambda obj_id: user if obj_id == user.id else None)
    repo.create_one = AsyncMock()

    return repo


@pytest.fixture
def refresh_token_repo() -> MagicMock:
    repo = MagicMock(spec=RefreshTokenRepo)
    repo.create_one = AsyncMock(
        side_effect=lambda schema: SimpleNamespace(
            id=uuid.uuid4(),
            created=datetime.now(UTC),
            modified=datetime.now(UTC),
            **schema.model_dump(),
        )
    )
    repo.get_valid_by_token_string = AsyncMock(return_value=None)
    repo.list_for_user = AsyncMock(return_value=[])

    return repo


@pytest.fixture
def test_app(
    key_manager: KeyMaterialManager,
    token_service: TokenService,
    rate_limiter: RateLimiter,
    credential_verifier: CredentialVerifier,
    user_repo: MagicMock,
    refresh_token_repo: MagicMock,
) -> FastAPI:
    """
    The application with its shared objects in place and the repositories
    replaced, so no database or Redis server is needed.
    """
    app.state.key_manager = key_manager
    app.state.token_service = token_service
    app.state.rate_limiter = rate_limiter
    app.state.credential_verifier = credential_verifier

    app.dependency_overrides[get_user_repo] = lambda: user_repo
    app.dependency_overrides[get_refresh_token_repo] = lambda: refresh_token_repo

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def offline_redis_client() -> fakeredis.FakeAsyncRedis:
    """A Redis client whose server refuses connections, without retries."""
    server = fakeredis.FakeServer()
    server.connected = False

    return fakeredis.FakeAsyncRedis(server=server, retry=Retry(NoBackoff(), 0))
