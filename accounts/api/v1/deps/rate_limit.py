from typing import Annotated

from fastapi import Depends, Request
from loguru import logger

from accounts.api.v1.deps.auth import get_optional_claims
from accounts.api.v1.deps.core import get_client_address, get_rate_limiter
from accounts.core.exceptions.access import CounterStoreUnavailableError, RateLimitExceeded
from accounts.core.exceptions.http_exceptions import (
    ServiceUnavailableException,
    TooManyRequestsException,
)
from accounts.core.identity import IPAddress
from accounts.schemas import Claims
from accounts.services.cache.rate_limiter import RateLimit, RateLimiter, RateLimitGroup


async def enforce_rate_limit(request: Request, rate_limiter: RateLimiter, limit: RateLimit) -> None:
    """
    Count the request against a limit and translate the outcome to HTTP.

    Args:
        request: FastAPI request object
        rate_limiter: Limiter to count with
        limit: Limit of the call site

    Raises:
        TooManyRequestsException: When rate limit is exceeded (HTTP 429)
        ServiceUnavailableException: When the counter store failed (HTTP 503)
    """
    try:
        info = await rate_limiter.enforce(limit)
    except RateLimitExceeded as e:
        logger.warning(f"Rate limit exceeded. Key: {limit.key.store_key}")
        raise TooManyRequestsException(
            detail=f"Too many requests. Try again in {e.retry_after} seconds.",
            headers={
                "Retry-After": str(e.retry_after),
                "X-RateLimit-Limit": str(limit.capacity),
                "X-RateLimit-Remaining": "0",
            },
        )
    except CounterStoreUnavailableError:
        # Fail closed, without internal details
        raise ServiceUnavailableException(detail="Service temporarily unavailable.")

    # Store rate limit info in request state for middleware
    request.state.rate_limit_info = info


async def rate_limit_general(
    request: Request,
    claims: Annotated[Claims | None, Depends(get_optional_claims)],
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> None:
    """
    Rate limiting for general API traffic.

    Key strategy: user id when the request carries a valid JWT, else client address
    """
    if claims is not None:
        identifier = claims.user.id
    else:
        identifier = get_client_address(request)

    await enforce_rate_limit(
        request, rate_limiter, RateLimit.for_group(RateLimitGroup.GENERAL, identifier)
    )


async def rate_limit_login(
    request: Request,
    client_address: Annotated[IPAddress, Depends(get_client_address)],
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> None:
    """
    Strict rate limiting for endpoints that check a password (address based).
    """
    await enforce_rate_limit(
        request, rate_limiter, RateLimit.for_group(RateLimitGroup.LOGIN, client_address)
    )


async def rate_limit_register(
    request: Request,
    client_address: Annotated[IPAddress, Depends(get_client_address)],
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> None:
    await enforce_rate_limit(
        request, rate_limiter, RateLimit.for_group(RateLimitGroup.REGISTER, client_address)
    )
