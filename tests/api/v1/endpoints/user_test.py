import uuid
from datetime import UTC, datetime
from types import SimpleNamespace

import pytest
from httpx import AsyncClient

from accounts.core.tokens import TokenService
from accounts.schemas import Claims, ClaimsUser


def sign_for(token_service: TokenService, user_id: uuid.UUID, lifetime: int = 60) -> str:
    now = int(datetime.now(UTC).timestamp())

    return token_service.encode(
        Claims(
            user=ClaimsUser(id=user_id, username="whoever"),
            parent_token=uuid.uuid4(),
            iat=now,
            exp=now + lifetime,
        )
    )


@pytest.mark.anyio
class TestReadUserMe:
    """Test suite for GET /api/v1/users/me."""

    async def test_read_me(
        self, client: AsyncClient, token_service: TokenService, user: SimpleNamespace
    ):
        """Test that the bearer token's user is returned."""
        token = sign_for(token_service, user.id)

        response = await client.get(
            "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json()["username"] == user.username
        assert "password_hash" not in response.json()

    async def test_read_me_without_token(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_read_me_token_from_other_key(
        self, client: AsyncClient, other_key_manager, user: SimpleNamespace
    ):
        """Test that a token signed with a different key is rejected."""
        token = sign_for(TokenService(other_key_manager), user.id)

        response = await client.get(
            "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    async def test_read_me_deleted_user(self, client: AsyncClient, token_service: TokenService):
        """Test that a token of a user that no longer exists is rejected."""
        token = sign_for(token_service, uuid.uuid4())

        response = await client.get(
            "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "User no longer exists"
