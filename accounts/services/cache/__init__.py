from .base import BaseRedisClient, close_redis_pool, create_redis_client, get_redis_pool
from .rate_limiter import (
    RateLimit,
    RateLimiter,
    RateLimitGroup,
    RateLimitInfo,
    RateLimitKey,
)

__all__ = [
    "BaseRedisClient",
    "close_redis_pool",
    "create_redis_client",
    "get_redis_pool",
    "RateLimit",
    "RateLimiter",
    "RateLimitGroup",
    "RateLimitInfo",
    "RateLimitKey",
]
