from .base import BaseSchema, BaseTimestampSchema
from .healthcheck import HealthCheckResponse
from .user import UserCreate, UserResponse, UserSignup
from .token import (
    Claims,
    ClaimsUser,
    NewRefreshToken,
    PublicKeyResponse,
    RefreshTokenCreate,
    RefreshTokenListRequest,
    RefreshTokenResponse,
    RefreshTokenSummary,
    SignJwtRequest,
    Token,
    TokenValidationRequest,
    TokenValidationResponse,
)

__all__ = [
    "BaseSchema",
    "BaseTimestampSchema",
    "HealthCheckResponse",
    "UserCreate",
    "UserResponse",
    "UserSignup",
    "Claims",
    "ClaimsUser",
    "NewRefreshToken",
    "PublicKeyResponse",
    "RefreshTokenCreate",
    "RefreshTokenListRequest",
    "RefreshTokenResponse",
    "RefreshTokenSummary",
    "SignJwtRequest",
    "Token",
    "TokenValidationRequest",
    "TokenValidationResponse",
]
