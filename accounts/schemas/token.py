import uuid
from datetime import datetime
from typing import Annotated

from pydantic import Field, SecretStr, model_validator

from accounts.core.config import settings
from accounts.core.constants import FieldSizes
from accounts.schemas.base import BaseSchema


class ClaimsUser(BaseSchema):
    """Snapshot of the user a JWT was issued to"""

    id: uuid.UUID
    username: str
    email: str | None = None
    display_name: str | None = None
    groups: list[str] = Field(default_factory=list)


class Claims(BaseSchema):
    """Payload of a signed JWT"""

    user: ClaimsUser
    parent_token: uuid.UUID
    iat: int
    exp: int

    @model_validator(mode="after")
    def check_expiry_after_issue(self) -> "Claims":
        if self.exp <= self.iat:
            raise ValueError("exp must be after iat")

        return self

    @property
    def lifetime(self) -> int:
        return self.exp - self.iat


class RefreshTokenCreate(BaseSchema):
    """Values persisted for a new refresh token"""

    token_string: str
    expires: datetime
    user_id: uuid.UUID
    client_address: str
    max_jwt_lifetime: int


class NewRefreshToken(BaseSchema):
    """User credentials and lifetimes for a new refresh token"""

    username: Annotated[str, Field(min_length=1, max_length=FieldSizes.USERNAME)]
    password: Annotated[SecretStr, Field(max_length=FieldSizes.PASSWORD)]
    expires_in_seconds: Annotated[
        int,
        Field(
            ge=settings.refresh_token_min_lifetime,
            le=settings.refresh_token_max_lifetime,
            description="The timespan from now the token is valid for, in seconds.",
        ),
    ] = settings.refresh_token_default_lifetime
    max_jwt_lifetime: Annotated[
        int,
        Field(
            ge=settings.jwt_lifetime_min,
            le=settings.jwt_lifetime_max,
            description="The maximum lifetime of JWTs signed with this token, in seconds.",
        ),
    ] = settings.jwt_default_lifetime


class RefreshTokenListRequest(BaseSchema):
    """Credentials for listing a user's refresh tokens"""

    username: Annotated[str, Field(min_length=1, max_length=FieldSizes.USERNAME)]
    password: Annotated[SecretStr, Field(max_length=FieldSizes.PASSWORD)]
    valid: bool = True


class RefreshTokenResponse(BaseSchema):
    """Refresh token returned to its owner"""

    id: uuid.UUID
    token_string: str
    created: datetime
    modified: datetime
    expires: datetime
    user_id: uuid.UUID
    client_address: str
    max_jwt_lifetime: int


class RefreshTokenSummary(BaseSchema):
    """Refresh token listing entry, without the secret token string"""

    id: uuid.UUID
    created: datetime
    expires: datetime
    client_address: str
    max_jwt_lifetime: int


class SignJwtRequest(BaseSchema):
    """Request to sign a JWT with a refresh token"""

    refresh_token: Annotated[str, Field(min_length=1, max_length=FieldSizes.TOKEN_STRING)]
    lifetime: Annotated[int, Field(gt=0)] = settings.jwt_default_lifetime


class Token(BaseSchema):
    """Signed JWT response"""

    access_token: str
    token_type: str = "Bearer"

    def __str__(self):
        return self.token_type + " " + self.access_token


class TokenValidationRequest(BaseSchema):
    token: str


class TokenValidationResponse(BaseSchema):
    valid: bool


class PublicKeyResponse(BaseSchema):
    algorithm: str
    public_key: str
