from typing import Any, Optional

from fastapi import HTTPException as FastAPIHTTPException
from starlette import status


class CustomException(Exception):
    """
    Base for all custom exceptions
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.exception = exception

    def __str__(self):
        if self.exception:
            return f"{self.message}\nException: {self.exception}"

        return self.message


class HTTPException(FastAPIHTTPException):
    """
    Base for the status specific exceptions in http_exceptions.

    Subclasses only pick their status code; the deps layer supplies the
    detail and, where the client needs them, response headers.
    """

    default_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        detail: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=self.default_status_code, detail=detail, headers=headers)
