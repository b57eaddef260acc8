import time
import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Self, TypedDict

from loguru import logger
from redis.asyncio import Redis
from redis.exceptions import RedisError

from accounts.core.config import settings
from accounts.core.constants import RATE_LIMIT_PREFIX
from accounts.core.exceptions.access import (
    CounterStoreUnavailableError,
    RateLimitConfigurationError,
    RateLimitExceeded,
)
from accounts.core.identity import IPAddress
from accounts.services.cache.base import BaseRedisClient

# Fixed window step, run atomically on the server.
# Returns {allowed, remaining, ttl, expiry_restored}.
FIXED_WINDOW_SCRIPT = """
local key = KEYS[1]
local capacity = tonumber(ARGV[1])
local window = tonumber(ARGV[2])

local remaining = redis.call('GET', key)
if not remaining then
  redis.call('SET', key, capacity - 1, 'EX', window)
  return {1, capacity - 1, window, 0}
end

local ttl = redis.call('TTL', key)
local restored = 0
if ttl < 0 then
  redis.call('EXPIRE', key, window)
  ttl = window
  restored = 1
end

if tonumber(remaining) <= 0 then
  return {0, 0, ttl, restored}
end

local left = redis.call('DECRBY', key, 1)
return {1, left, ttl, restored}
"""


class RateLimitGroup(StrEnum):
    GENERAL = "general"
    LOGIN = "login"
    REGISTER = "register"


@dataclass(frozen=True)
class RateLimitKey:
    """
    Who is being limited, and for which category of requests.

    The identifier is the caller's network address, or the user id when the
    request carries a valid token.
    """

    group: RateLimitGroup
    identifier: IPAddress | uuid.UUID

    @property
    def store_key(self) -> str:
        kind = "user" if isinstance(self.identifier, uuid.UUID) else "addr"
        return f"{RATE_LIMIT_PREFIX}{self.group.value}:{kind}:{self.identifier}"


@dataclass(frozen=True)
class RateLimit:
    """A fully configured limit for one call site"""

    group: RateLimitGroup
    identifier: IPAddress | uuid.UUID
    capacity: int
    window: int

    def __post_init__(self):
        _validate(self.capacity, self.window)

    @property
    def key(self) -> RateLimitKey:
        return RateLimitKey(group=self.group, identifier=self.identifier)

    @classmethod
    def for_group(cls, group: RateLimitGroup, identifier: IPAddress | uuid.UUID) -> Self:
        """Build the configured limit of a group for one caller"""
        capacity, window = {
            RateLimitGroup.GENERAL: (settings.rate_limit_general, settings.rate_limit_general_window),
            RateLimitGroup.LOGIN: (settings.rate_limit_login, settings.rate_limit_login_window),
            RateLimitGroup.REGISTER: (
                settings.rate_limit_register,
                settings.rate_limit_register_window,
            ),
        }[group]

        return cls(group=group, identifier=identifier, capacity=capacity, window=window)


class RateLimitInfo(TypedDict):
    """Rate limit information returned by check operations"""

    limit: int
    remaining: int
    reset_time: int
    window: int


def _validate(capacity: int, window: int) -> None:
    if capacity <= 0:
        raise RateLimitConfigurationError(f"Rate limit capacity must be positive, got {capacity}")
    if window <= 0:
        raise RateLimitConfigurationError(f"Rate limit window must be positive, got {window}")


class RateLimiter(BaseRedisClient):
    """
    Redis-based rate limiter using a fixed window.

    Each key holds the number of requests left in the current window and
    expires together with the window:

    1. The first request of a window creates the counter at `capacity - 1`
       with a TTL of `window` seconds
    2. Every further request decrements the counter by one
    3. A request that finds the counter at zero is rejected, with the
       counter's TTL as the time to wait

    Each step runs as one Lua script on the Redis server, so concurrent
    requests from many processes can neither create the window twice nor
    drive the counter below zero, and they never fail each other. A rejected
    request leaves the counter untouched and a decrement is never rolled
    back. A counter found without an expiry gets the window re-attached.

    Any Redis failure raises CounterStoreUnavailableError. The limiter never
    lets a request through because the store could not be reached.

    Example:
        ```python
        limit = RateLimit.for_group(RateLimitGroup.LOGIN, client_address)

        try:
            await rate_limiter.enforce(limit)
        except RateLimitExceeded as e:
            raise TooManyRequestsException(retry_after=e.retry_after)
        ```
    """

    def __init__(self, redis_client: Redis):
        super().__init__(redis_client)
        self._fixed_window = self.redis_client.register_script(FIXED_WINDOW_SCRIPT)

    async def check(self, key: RateLimitKey, capacity: int, window: int) -> RateLimitInfo:
        """
        Count one request against a key.

        Args:
            key: Who is being limited
            capacity: Maximum number of requests allowed in the window
            window: Window length in seconds

        Returns:
            RateLimitInfo: State of the window after this request

        Raises:
            RateLimitConfigurationError: If capacity or window is invalid
            RateLimitExceeded: If no requests are left in the window
            CounterStoreUnavailableError: If Redis failed
        """
        _validate(capacity, window)
        store_key = key.store_key

        try:
            allowed, remaining, ttl, expiry_restored = await self._fixed_window(
                keys=[store_key],
                args=[capacity, window],
            )
        except RedisError as e:
            logger.error(f"Rate limit check failed for {store_key}: {e}")
            raise CounterStoreUnavailableError(exception=e)

        ttl = int(ttl)

        if int(expiry_restored):
            logger.warning(f"Rate limit counter {store_key} had no expiry, restored to {window}s")

        if not int(allowed):
            logger.info(f"Rate limit exceeded for {store_key}, retry in {ttl}s")
            raise RateLimitExceeded(retry_after=ttl)

        return RateLimitInfo(
            limit=capacity,
            remaining=int(remaining),
            reset_time=int(time.time()) + max(ttl, 0),
            window=window,
        )

    async def enforce(self, limit: RateLimit) -> RateLimitInfo:
        """Count one request against a configured limit"""
        return await self.check(limit.key, limit.capacity, limit.window)

    async def get_limit_info(self, key: RateLimitKey, capacity: int, window: int) -> RateLimitInfo:
        """
        Get current rate limit information without modifying counters.

        Raises:
            CounterStoreUnavailableError: If Redis failed
        """
        _validate(capacity, window)
        store_key = key.store_key

        try:
            async with self.redis_client.pipeline(transaction=False) as pipe:
                pipe.get(store_key)
                pipe.ttl(store_key)
                remaining, ttl = await pipe.execute()
        except RedisError as e:
            logger.error(f"Failed to get limit info for {store_key}: {e}")
            raise CounterStoreUnavailableError(exception=e)

        now = int(time.time())

        if remaining is None:
            return RateLimitInfo(limit=capacity, remaining=capacity, reset_time=now + window, window=window)

        return RateLimitInfo(
            limit=capacity,
            remaining=max(0, int(remaining)),
            reset_time=now + max(ttl, 0),
            window=window,
        )

    async def reset_limit(self, key: RateLimitKey) -> bool:
        """
        Reset rate limit for a specific key.

        Returns:
            bool: True if a counter was deleted

        Note:
            This is useful for tests or manual intervention (e.g., unblocking a user).
        """
        try:
            deleted = await self.redis_client.delete(key.store_key)
        except RedisError as e:
            logger.error(f"Failed to reset rate limit for {key.store_key}: {e}")
            raise CounterStoreUnavailableError(exception=e)

        if deleted:
            logger.info(f"Rate limit reset for {key.store_key}")

        return deleted > 0
