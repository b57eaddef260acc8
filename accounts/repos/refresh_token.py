import uuid
from datetime import UTC, datetime
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.models.refresh_token import RefreshToken
from accounts.repos.base import BaseRepository
from accounts.schemas import RefreshTokenCreate


class RefreshTokenRepo(BaseRepository[RefreshToken, RefreshTokenCreate]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, RefreshToken)

    async def get_valid_by_token_string(self, token_string: str) -> RefreshToken | None:
        """
        Get an unexpired refresh token by its token string

        Args:
            token_string (str): The secret token string.

        Returns:
            RefreshToken | None: The token if it exists and has not expired.
        """
        query = select(self.model).where(
            self.model.token_string == token_string,
            self.model.expires > datetime.now(UTC),
        )
        result = await self.session.execute(query)

        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: uuid.UUID, valid: bool = True) -> Sequence[RefreshToken]:
        """
        List a user's refresh tokens, oldest first

        Args:
            user_id (uuid.UUID): Owner of the tokens.
            valid (bool): List only unexpired tokens when True, every token when False.
        """
        query = select(self.model).where(self.model.user_id == user_id)

        if valid:
            query = query.where(self.model.expires > datetime.now(UTC))

        result = await self.session.execute(query.order_by(self.model.created))

        return result.scalars().all()
