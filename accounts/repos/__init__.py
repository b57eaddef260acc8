from .base import BaseRepository
from .refresh_token import RefreshTokenRepo
from .user import UserRepo

__all__ = ["BaseRepository", "RefreshTokenRepo", "UserRepo"]
