"""
SQLAlchemy ORM Models

Storage schema for the strategy revision store.

- StrategyRevisionDB: append-only log, one immutable row per saved revision
- StrategyPointerDB: one row per strategy naming the active revision

The pointer's ``current_revision_id`` is a soft reference: there is no
foreign key between the tables, so consistency is maintained by writing
both inside the same transaction.
"""

from typing import Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


# =============================================================================
# Revision Log
# =============================================================================

class StrategyRevisionDB(Base):
    """
    Strategy revision snapshot.

    Rows are inserted once and never updated; they are removed only when
    the whole strategy is deleted.
    """
    __tablename__ = "strategy_revisions"

    # Local sequence number (monotonic, never reused)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    strategy_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    revision_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Creation instant, milliseconds since epoch
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    # Snapshot of strategy state: {"name": str, "conditions": [...]}
    data: Mapped[dict] = mapped_column(JSON, nullable=False)

    change_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Reserved for multi-user deployments
    user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        Index(
            "ix_strategy_revisions_strategy_revision",
            "strategy_id",
            "revision_id",
            unique=True,
        ),
        # Keep SQLite from reusing ids of purged rows
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<StrategyRevision {self.strategy_id} {self.revision_id}>"


# =============================================================================
# Strategy Pointer Table
# =============================================================================

class StrategyPointerDB(Base):
    """
    Active-revision pointer and counters for one strategy.

    ``total_revisions`` counts revisions ever created. Restoring does not
    change it; only deleting the strategy resets it.
    """
    __tablename__ = "strategy_pointers"

    strategy_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    current_revision_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Milliseconds since epoch
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    total_revisions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<StrategyPointer {self.strategy_id} -> {self.current_revision_id}>"
