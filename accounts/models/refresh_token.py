import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from accounts.core.constants import FieldSizes
from accounts.models.base import Base


class RefreshToken(Base):
    """
    Long lived credential that JWTs are signed from.

    Rows are only inserted; a token stops being usable once `expires` passes.
    """

    token_string: Mapped[str] = mapped_column(
        String(FieldSizes.TOKEN_STRING),
        unique=True,
        index=True,
        nullable=False,
    )
    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("user.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    client_address: Mapped[str] = mapped_column(
        String(FieldSizes.CLIENT_ADDRESS),
        nullable=False,
    )
    # Seconds
    max_jwt_lifetime: Mapped[int] = mapped_column(Integer(), nullable=False)

    def is_valid(self) -> bool:
        return self.expires > datetime.now(UTC)
