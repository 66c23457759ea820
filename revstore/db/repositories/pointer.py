"""Strategy pointer repository

One row per strategy naming its active revision, plus counters.
"""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.strategy import StrategyStats
from ..models import StrategyPointerDB


class PointerRepository:
    """Repository for the per-strategy active revision pointer"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, strategy_id: str) -> Optional[StrategyPointerDB]:
        """Get the pointer row for a strategy."""
        result = await self.session.execute(
            select(StrategyPointerDB).where(StrategyPointerDB.strategy_id == strategy_id)
        )
        return result.scalar_one_or_none()

    async def upsert_on_save(
        self,
        strategy_id: str,
        new_revision_id: str,
        timestamp: int,
    ) -> StrategyPointerDB:
        """
        Advance the pointer after a save.

        Creates the row on the first save of a strategy; afterwards moves
        the pointer and increments ``total_revisions``.
        """
        pointer = await self.get(strategy_id)
        if pointer is None:
            pointer = StrategyPointerDB(
                strategy_id=strategy_id,
                current_revision_id=new_revision_id,
                created_at=timestamp,
                updated_at=timestamp,
                total_revisions=1,
            )
            self.session.add(pointer)
        else:
            pointer.current_revision_id = new_revision_id
            pointer.updated_at = timestamp
            pointer.total_revisions = (pointer.total_revisions or 0) + 1

        await self.session.flush()
        return pointer

    async def set_current(
        self,
        strategy_id: str,
        revision_id: str,
        timestamp: int,
    ) -> bool:
        """
        Move the pointer without touching ``total_revisions``.

        The caller must have verified that the revision exists.
        Returns False if the strategy has no pointer row.
        """
        pointer = await self.get(strategy_id)
        if pointer is None:
            return False

        pointer.current_revision_id = revision_id
        pointer.updated_at = timestamp
        await self.session.flush()
        return True

    async def stats(self, strategy_id: str) -> Optional[StrategyStats]:
        """Get counters for a strategy."""
        pointer = await self.get(strategy_id)
        if pointer is None:
            return None

        return StrategyStats(
            total_revisions=pointer.total_revisions,
            first_created=pointer.created_at,
            last_modified=pointer.updated_at,
        )

    async def delete(self, strategy_id: str) -> bool:
        """Remove the pointer row. Returns True if a row was removed."""
        result = await self.session.execute(
            delete(StrategyPointerDB).where(StrategyPointerDB.strategy_id == strategy_id)
        )
        await self.session.flush()
        return bool(result.rowcount)
