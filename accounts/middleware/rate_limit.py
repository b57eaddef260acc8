from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


class RateLimitHeaderMiddleware(BaseHTTPMiddleware):
    """
    Adds X-RateLimit-* headers to responses of rate limited endpoints.

    The rate limit dependencies leave the state of the caller's window in
    request.state.rate_limit_info; requests that were not counted get no
    headers. Rejected requests carry their headers on the 429 itself.
    """

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)

        info = getattr(request.state, "rate_limit_info", None)

        if info is not None:
            response.headers["X-RateLimit-Limit"] = str(info["limit"])
            response.headers["X-RateLimit-Remaining"] = str(info["remaining"])
            response.headers["X-RateLimit-Reset"] = str(info["reset_time"])

        return response
