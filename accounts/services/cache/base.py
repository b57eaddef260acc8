from abc import ABC

from loguru import logger
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from accounts.core.config import settings

# Shared Redis connection pool for the process
_redis_pool: ConnectionPool | None = None


def get_redis_pool() -> ConnectionPool:
    """
    Get or create the shared Redis connection pool.

    Returns:
        ConnectionPool: Shared Redis connection pool instance

    Note:
        Store operations that exceed the socket timeouts raise, they never
        block a request indefinitely.
    """
    global _redis_pool

    if _redis_pool is None:
        _redis_pool = ConnectionPool.from_url(
            settings.redis_url.human_repr(),
            encoding="utf-8",
            decode_responses=False,
            max_connections=settings.redis_max_pool_connections,
            socket_connect_timeout=settings.redis_socket_connect_timeout,
            socket_timeout=settings.redis_socket_timeout,
        )
        logger.info(
            f"Redis connection pool created with max_connections={settings.redis_max_pool_connections}"
        )
    return _redis_pool


def create_redis_client() -> Redis:
    """Create a Redis client bound to the shared connection pool"""
    return Redis(connection_pool=get_redis_pool())


async def close_redis_pool():
    global _redis_pool

    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None
        logger.info("Redis connection pool closed")


class BaseRedisClient(ABC):
    """
    Base class for services backed by Redis.

    The client is passed in by whoever builds the service, so tests and the
    application can each supply their own connection.
    """

    def __init__(self, redis_client: Redis):
        self._redis_client = redis_client

    @property
    def redis_client(self) -> Redis:
        return self._redis_client

    async def health_check(self) -> bool:
        """
        Check Redis connection health by pinging the server.

        Returns:
            bool: True if Redis is healthy and responsive, False otherwise
        """
        try:
            await self.redis_client.ping()
            return True
        except RedisError as e:
            logger.error(f"Redis health check failed for {self.__class__.__name__}: {e}")
            return False

    async def close(self):
        """Close Redis connection gracefully"""
        try:
            await self.redis_client.aclose()
            logger.info(f"Redis connection closed for {self.__class__.__name__}")
        except RedisError as e:
            logger.error(f"Error closing Redis connection for {self.__class__.__name__}: {e}")
