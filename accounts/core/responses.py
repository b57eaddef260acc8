from pydantic import BaseModel


class BadRequestResponse(BaseModel):
    detail: str = "Bad request"


class UnauthorizedResponse(BaseModel):
    detail: str = "Unauthorized"


class ForbiddenResponse(BaseModel):
    detail: str = "Forbidden"


class ConflictResponse(BaseModel):
    detail: str = "Conflict"


class TooManyRequestsResponse(BaseModel):
    detail: str = "Too many requests"


class ServiceUnavailableResponse(BaseModel):
    detail: str = "Service unavailable"


RATE_LIMITED_RESPONSES = {
    429: {
        "model": TooManyRequestsResponse,
        "headers": {
            "Retry-After": {
                "description": "Seconds until the rate limit window resets",
                "schema": {"type": "integer", "example": 1800},
            },
            "X-RateLimit-Limit": {
                "description": "Maximum requests allowed in the window",
                "schema": {"type": "integer", "example": 10},
            },
        },
    },
    503: {"model": ServiceUnavailableResponse},
}
