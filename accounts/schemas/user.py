import re
import uuid
from typing import Annotated

from pydantic import EmailStr, Field, SecretStr, field_validator

from accounts.core.constants import FieldSizes
from accounts.schemas.base import BaseSchema, BaseTimestampSchema

USER_USERNAME_REGEX = r"^[A-Za-z0-9_-]{4,20}$"
USER_USERNAME_DESCRIPTION = (
    "Username must be 4 to 20 characters long and contain only letters, "
    + "numbers, underscores or hyphens."
)
USER_PASSWORD_REGEX = r"^.{20,50}$"
USER_PASSWORD_DESCRIPTION = "Password must be 20 to 50 characters long."


class UserCreate(BaseSchema):
    """User creation schema"""

    username: str
    email: EmailStr | None = None
    display_name: str | None = None
    password_hash: str


class UserSignup(BaseSchema):
    """User signup schema"""

    username: Annotated[
        str,
        Field(
            max_length=FieldSizes.USERNAME,
            description=USER_USERNAME_DESCRIPTION,
        ),
    ]
    email: EmailStr | None = None
    display_name: Annotated[str | None, Field(max_length=FieldSizes.DISPLAY_NAME)] = None
    password: Annotated[
        SecretStr,
        Field(
            max_length=FieldSizes.PASSWORD,
            description=USER_PASSWORD_DESCRIPTION,
        ),
    ]

    @field_validator("username")
    def validate_username(cls, value: str) -> str:
        if re.match(USER_USERNAME_REGEX, value) is None:
            raise ValueError(USER_USERNAME_DESCRIPTION)

        return value

    @field_validator("password")
    def validate_password(cls, value: SecretStr) -> SecretStr:
        if re.match(USER_PASSWORD_REGEX, value.get_secret_value()) is None:
            raise ValueError(USER_PASSWORD_DESCRIPTION)

        return value


class UserResponse(BaseTimestampSchema):
    """User schema for API response"""

    id: uuid.UUID
    username: str
    email: str | None = None
    display_name: str | None = None
    groups: list[str]
