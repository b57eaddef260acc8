from unittest.mock import AsyncMock, patch

import fakeredis
import pytest
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError

from accounts.core.config import settings
from accounts.services.cache import base
from accounts.services.cache.base import BaseRedisClient, create_redis_client, get_redis_pool


class TestRedisPool:
    """Test the shared Redis connection pool."""

    def test_pool_is_shared(self):
        """Test that the pool is created once and reused."""
        with patch.object(base, "_redis_pool", None):
            first = get_redis_pool()
            second = get_redis_pool()

            assert isinstance(first, ConnectionPool)
            assert first is second
            assert first.max_connections == settings.redis_max_pool_connections

    def test_pool_has_timeouts(self):
        """Test that store calls cannot hang without a timeout."""
        with patch.object(base, "_redis_pool", None):
            kwargs = get_redis_pool().connection_kwargs

            assert kwargs["socket_timeout"] == settings.redis_socket_timeout
            assert kwargs["socket_connect_timeout"] == settings.redis_socket_connect_timeout

    def test_client_uses_shared_pool(self):
        """Test that clients are bound to the shared pool."""
        with patch.object(base, "_redis_pool", None):
            client = create_redis_client()

            assert isinstance(client, Redis)
            assert client.connection_pool is get_redis_pool()


@pytest.mark.anyio
class TestBaseRedisClient:
    """Test health checks and shutdown."""

    async def test_health_check_healthy(self, redis_client: fakeredis.FakeAsyncRedis):
        """Test that a reachable store is healthy."""
        assert await BaseRedisClient(redis_client).health_check() is True

    async def test_health_check_unreachable(self):
        """Test that a failing ping reports unhealthy instead of raising."""
        redis_client = AsyncMock()
        redis_client.ping.side_effect = ConnectionError("refused")

        assert await BaseRedisClient(redis_client).health_check() is False

    async def test_close(self):
        """Test that close closes the injected client."""
        redis_client = AsyncMock()

        await BaseRedisClient(redis_client).close()

        redis_client.aclose.assert_awaited_once()
