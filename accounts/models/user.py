from typing import Optional

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from accounts.core.constants import FieldSizes
from accounts.models.base import Base


class User(Base):
    """User model"""

    username: Mapped[str] = mapped_column(
        String(FieldSizes.USERNAME),
        unique=True,
        index=True,
        nullable=False,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(FieldSizes.EMAIL),
        nullable=True,
    )
    display_name: Mapped[Optional[str]] = mapped_column(
        String(FieldSizes.DISPLAY_NAME),
        nullable=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(FieldSizes.PASSWORD_HASH),
        nullable=False,
    )
    groups: Mapped[list[str]] = mapped_column(
        ARRAY(String(FieldSizes.GROUP_NAME)),
        nullable=False,
        default=list,
        server_default="{}",
    )
