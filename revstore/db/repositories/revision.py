"""Revision log repository

Append-only storage of strategy snapshots. Rows are never updated;
the only delete is a whole-strategy purge.
"""

from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.identifiers import generate_revision_id, now_ms
from ...models.strategy import StrategySnapshot
from ..models import StrategyRevisionDB


class RevisionRepository:
    """Repository for the append-only revision log"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        strategy_id: str,
        snapshot: StrategySnapshot,
        change_description: Optional[str] = None,
        timestamp: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> StrategyRevisionDB:
        """
        Store a new immutable revision.

        The snapshot is serialized into a fresh JSON structure, so later
        mutation of the caller's object cannot reach stored history.
        """
        if timestamp is None:
            timestamp = now_ms()

        revision = StrategyRevisionDB(
            strategy_id=strategy_id,
            revision_id=generate_revision_id(timestamp),
            timestamp=timestamp,
            data=snapshot.to_storage(),
            change_description=change_description,
            user_id=user_id,
        )
        self.session.add(revision)
        await self.session.flush()
        return revision

    async def history(
        self,
        strategy_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[StrategyRevisionDB]:
        """
        Get revisions for a strategy, newest first.

        Saves within the same millisecond are ordered by local sequence
        number, so the order is deterministic.
        """
        query = (
            select(StrategyRevisionDB)
            .where(StrategyRevisionDB.strategy_id == strategy_id)
            .order_by(
                StrategyRevisionDB.timestamp.desc(),
                StrategyRevisionDB.id.desc(),
            )
        )
        if limit is not None:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get(
        self,
        strategy_id: str,
        revision_id: str,
    ) -> Optional[StrategyRevisionDB]:
        """Get a specific revision by compound key."""
        query = select(StrategyRevisionDB).where(
            StrategyRevisionDB.strategy_id == strategy_id,
            StrategyRevisionDB.revision_id == revision_id,
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def count(self, strategy_id: str) -> int:
        """Number of revisions currently retained for a strategy."""
        query = select(func.count(StrategyRevisionDB.id)).where(
            StrategyRevisionDB.strategy_id == strategy_id
        )
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def purge(self, strategy_id: str) -> int:
        """Delete every revision of a strategy. Returns rows removed."""
        result = await self.session.execute(
            delete(StrategyRevisionDB).where(
                StrategyRevisionDB.strategy_id == strategy_id
            )
        )
        await self.session.flush()
        return result.rowcount or 0
