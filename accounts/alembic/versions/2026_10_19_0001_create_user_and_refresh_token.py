"""create user and refresh_token tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from accounts.core.config import settings

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = settings.postgres_db_schema


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False
        ),
        sa.Column(
            "created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "modified", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        *_base_columns(),
        sa.Column("username", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=50), nullable=True),
        sa.Column("password_hash", sa.String(length=1000), nullable=False),
        sa.Column(
            "groups",
            postgresql.ARRAY(sa.String(length=50)),
            server_default="{}",
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user")),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_user_username"), "user", ["username"], unique=True, schema=SCHEMA
    )

    op.create_table(
        "refresh_token",
        *_base_columns(),
        sa.Column("token_string", sa.String(length=100), nullable=False),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("client_address", sa.String(length=45), nullable=False),
        sa.Column("max_jwt_lifetime", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"],
            [f"{SCHEMA}.user.id"],
            name=op.f("fk_refresh_token_user_id_user"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_refresh_token")),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_refresh_token_token_string"),
        "refresh_token",
        ["token_string"],
        unique=True,
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_refresh_token_user_id"), "refresh_token", ["user_id"], unique=False, schema=SCHEMA
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_refresh_token_user_id"), table_name="refresh_token", schema=SCHEMA)
    op.drop_index(
        op.f("ix_refresh_token_token_string"), table_name="refresh_token", schema=SCHEMA
    )
    op.drop_table("refresh_token", schema=SCHEMA)
    op.drop_index(op.f("ix_user_username"), table_name="user", schema=SCHEMA)
    op.drop_table("user", schema=SCHEMA)
