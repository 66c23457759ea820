"""Revision store schema

Append-only strategy revision log plus the per-strategy pointer table.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "strategy_revisions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("strategy_id", sa.String(128), nullable=False),
        sa.Column("revision_id", sa.String(64), nullable=False),
        sa.Column("timestamp", sa.BigInteger, nullable=False),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("change_description", sa.Text, nullable=True),
        sa.Column("user_id", sa.String(128), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_strategy_revisions_strategy_id", "strategy_revisions", ["strategy_id"])
    op.create_index("ix_strategy_revisions_timestamp", "strategy_revisions", ["timestamp"])
    op.create_index(
        "ix_strategy_revisions_strategy_revision",
        "strategy_revisions",
        ["strategy_id", "revision_id"],
        unique=True,
    )

    op.create_table(
        "strategy_pointers",
        sa.Column("strategy_id", sa.String(128), primary_key=True),
        sa.Column("current_revision_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("updated_at", sa.BigInteger, nullable=False),
        sa.Column("total_revisions", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_strategy_pointers_updated_at", "strategy_pointers", ["updated_at"])


def downgrade() -> None:
    op.drop_table("strategy_pointers")
    op.drop_table("strategy_revisions")
