from starlette import status

from accounts.core.exceptions.base import HTTPException


class BadRequestException(HTTPException):
    """
    Rejected by validation, e.g. a token lifetime outside the allowed range
    or an unparseable proxy header.
    """

    default_status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedException(HTTPException):
    """
    Wrong credentials, an unknown refresh token or a rejected JWT.
    Raised with a `WWW-Authenticate: Bearer` header.
    """

    default_status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(HTTPException):
    """Understood but refused, e.g. registration while registrations are disabled."""

    default_status_code = status.HTTP_403_FORBIDDEN


class ConflictException(HTTPException):
    """Conflicts with an existing resource, e.g. a taken username."""

    default_status_code = status.HTTP_409_CONFLICT


class TooManyRequestsException(HTTPException):
    """
    The caller's rate limit window is used up. Raised with a Retry-After
    header telling when the window resets.
    """

    default_status_code = status.HTTP_429_TOO_MANY_REQUESTS


class ServiceUnavailableException(HTTPException):
    """A backing store could not serve the request. The detail never carries internals."""

    default_status_code = status.HTTP_503_SERVICE_UNAVAILABLE
