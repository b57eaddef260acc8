from accounts.core.exceptions.base import CustomException

# =============================================================================
# Rate limiting
# =============================================================================


class RateLimiterException(CustomException):
    """
    Base exception for the rate limiter
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class RateLimitExceeded(RateLimiterException):
    """
    No requests left in the current window for a key
    """

    def __init__(
        self,
        retry_after: int,
        message: str | None = None,
        exception: Exception | None = None,
    ):
        self.retry_after = retry_after
        super().__init__(
            message or f"Rate limit exceeded, try again in {retry_after} seconds",
            exception,
        )


class RateLimitConfigurationError(RateLimiterException):
    """
    Invalid rate limit configuration
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class CounterStoreUnavailableError(RateLimiterException):
    """
    The counter store failed or timed out. Never means "not rate limited".
    """

    def __init__(
        self, message="Counter store is unavailable", exception: Exception | None = None
    ):
        super().__init__(message, exception)


# =============================================================================
# Keys and tokens
# =============================================================================


class KeyMalformedError(CustomException):
    """
    Supplied bytes are not a valid RSA private key
    """

    def __init__(self, message="Key material is malformed", exception: Exception | None = None):
        super().__init__(message, exception)


class TokenError(CustomException):
    """
    Base exception for rejected tokens
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class InvalidSignatureError(TokenError):
    def __init__(self, message="Token signature is invalid", exception: Exception | None = None):
        super().__init__(message, exception)


class TokenExpiredError(TokenError):
    def __init__(self, message="Token has expired", exception: Exception | None = None):
        super().__init__(message, exception)


class TokenMalformedError(TokenError):
    def __init__(self, message="Token is malformed", exception: Exception | None = None):
        super().__init__(message, exception)


# =============================================================================
# Refresh tokens
# =============================================================================


class OutOfRangeError(CustomException):
    """
    A requested lifetime is outside the allowed bounds
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class LifetimeExceededError(CustomException):
    """
    Requested JWT lifetime is above the refresh token's maximum
    """

    def __init__(self, max_jwt_lifetime: int, exception: Exception | None = None):
        self.max_jwt_lifetime = max_jwt_lifetime
        super().__init__(
            f"Requested JWT lifetime exceeds the limit of {max_jwt_lifetime}.", exception
        )


class RefreshTokenNotFoundError(CustomException):
    """
    No refresh token with that string, or it has expired
    """

    def __init__(self, message="Refresh token not found", exception: Exception | None = None):
        super().__init__(message, exception)


# =============================================================================
# Credentials
# =============================================================================


class InvalidCredentialsError(CustomException):
    """
    Base for credential failures. Callers outside the verifier must not
    tell the subclasses apart in what they show to clients.
    """

    def __init__(
        self, message="Incorrect username or password", exception: Exception | None = None
    ):
        super().__init__(message, exception)


class CredentialsNotFoundError(InvalidCredentialsError):
    """No user with the given username"""


class WrongPasswordError(InvalidCredentialsError):
    """Password does not match the stored hash"""


# =============================================================================
# Client address
# =============================================================================


class ClientAddressError(CustomException):
    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class ClientAddressMalformedError(ClientAddressError):
    """
    The forwarded address header is present but cannot be parsed
    """

    def __init__(
        self, message="Failed to parse client address", exception: Exception | None = None
    ):
        super().__init__(message, exception)


class ClientAddressUnavailableError(ClientAddressError):
    """
    Neither the forwarded header nor the connection yields an address
    """

    def __init__(
        self, message="Failed to get client address", exception: Exception | None = None
    ):
        super().__init__(message, exception)
