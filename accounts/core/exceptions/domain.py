from accounts.core.exceptions.base import CustomException

# =============================================================================
# Generic Domain Exceptions (raised by Services, caught by Deps)
# =============================================================================


class DuplicateResourceError(CustomException):
    """Attempted to create a resource that already exists."""

    def __init__(
        self, message: str = "Resource already exists", exception: Exception | None = None
    ):
        super().__init__(message, exception)


class RegistrationDisabledError(CustomException):
    """New accounts cannot be created on this server."""

    def __init__(
        self, message: str = "Registrations are disabled", exception: Exception | None = None
    ):
        super().__init__(message, exception)
