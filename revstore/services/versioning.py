"""
Strategy versioning service.

Orchestrates the revision log and the pointer table:

- save:    append a revision, then advance the pointer (same timestamp)
- restore: look up a revision, then move the pointer to it. Restore is a
           checkout, not a revert-commit: history length is unchanged.
- delete:  purge revisions, then drop the pointer

Both steps of every write share the manager's session and are only
flushed here, so they commit (or roll back) together at the session
owner's boundary (``get_db`` or ``unit_of_work``).

Absence is returned as ``None``. Storage errors propagate unchanged.
"""

import logging
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.identifiers import now_ms
from ..db.models import StrategyRevisionDB
from ..db.repositories import PointerRepository, RevisionRepository
from ..models.strategy import (
    Change,
    IntegrityReport,
    Revision,
    StrategySnapshot,
    StrategyStats,
)
from . import diff as diff_engine

logger = logging.getLogger(__name__)

SnapshotInput = Union[StrategySnapshot, dict]


def _to_revision(row: StrategyRevisionDB) -> Revision:
    """Detached, validated copy of a stored row."""
    return Revision(
        id=row.id,
        strategy_id=row.strategy_id,
        revision_id=row.revision_id,
        timestamp=row.timestamp,
        data=StrategySnapshot.model_validate(row.data),
        change_description=row.change_description,
        user_id=row.user_id,
    )


class StrategyVersionManager:
    """Versioning facade over the revision log and pointer table"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.revisions = RevisionRepository(session)
        self.pointers = PointerRepository(session)

    async def save_revision(
        self,
        strategy_id: str,
        data: SnapshotInput,
        change_description: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> str:
        """
        Commit a new snapshot and make it the active revision.

        Returns:
            The new revision id
        """
        snapshot = StrategySnapshot.model_validate(
            data.model_dump() if isinstance(data, StrategySnapshot) else data
        )
        timestamp = now_ms()

        revision = await self.revisions.append(
            strategy_id,
            snapshot,
            change_description=change_description,
            timestamp=timestamp,
            user_id=user_id,
        )
        pointer = await self.pointers.upsert_on_save(
            strategy_id, revision.revision_id, timestamp
        )

        logger.info(
            f"Saved revision {revision.revision_id} for strategy {strategy_id} "
            f"(total={pointer.total_revisions})"
        )
        return revision.revision_id

    async def get_revision_history(
        self,
        strategy_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Revision]:
        """Revisions newest first; empty for an unknown strategy."""
        rows = await self.revisions.history(strategy_id, limit=limit, offset=offset)
        return [_to_revision(row) for row in rows]

    async def get_revision(
        self,
        strategy_id: str,
        revision_id: str,
    ) -> Optional[Revision]:
        row = await self.revisions.get(strategy_id, revision_id)
        return _to_revision(row) if row else None

    async def get_current_revision(self, strategy_id: str) -> Optional[Revision]:
        """Revision the pointer currently names, if any."""
        pointer = await self.pointers.get(strategy_id)
        if pointer is None:
            return None
        return await self.get_revision(strategy_id, pointer.current_revision_id)

    async def restore_revision(
        self,
        strategy_id: str,
        revision_id: str,
    ) -> Optional[StrategySnapshot]:
        """
        Point the strategy at an earlier revision.

        Returns:
            A fresh copy of the stored snapshot, or None if the revision
            does not exist (the pointer is left untouched)
        """
        row = await self.revisions.get(strategy_id, revision_id)
        if row is None:
            logger.info(
                f"Restore skipped: revision {revision_id} not found for strategy {strategy_id}"
            )
            return None

        moved = await self.pointers.set_current(strategy_id, revision_id, now_ms())
        if not moved:
            logger.warning(
                f"Strategy {strategy_id} has revisions but no pointer row; "
                f"restore of {revision_id} did not move the pointer"
            )
        else:
            logger.info(f"Restored strategy {strategy_id} to revision {revision_id}")

        return StrategySnapshot.model_validate(row.data)

    async def delete_strategy(self, strategy_id: str) -> None:
        """Remove all history and the pointer for a strategy. Idempotent."""
        removed = await self.revisions.purge(strategy_id)
        await self.pointers.delete(strategy_id)
        logger.info(f"Deleted strategy {strategy_id} ({removed} revisions purged)")

    async def get_strategy_stats(self, strategy_id: str) -> Optional[StrategyStats]:
        return await self.pointers.stats(strategy_id)

    @staticmethod
    def generate_diff(old: SnapshotInput, new: SnapshotInput) -> list[Change]:
        return diff_engine.generate_diff(old, new)

    async def compare_revisions(
        self,
        strategy_id: str,
        from_revision_id: str,
        to_revision_id: str,
    ) -> Optional[list[Change]]:
        """
        Diff two stored revisions of one strategy.

        Returns None if either revision does not exist.
        """
        old = await self.revisions.get(strategy_id, from_revision_id)
        new = await self.revisions.get(strategy_id, to_revision_id)
        if old is None or new is None:
            return None
        return diff_engine.generate_diff(old.data, new.data)

    async def verify_integrity(self, strategy_id: str) -> IntegrityReport:
        """
        Check cross-table consistency for one strategy.

        Detects a dangling pointer, revisions without a pointer, and drift
        between ``total_revisions`` and the retained row count. Nothing is
        repaired.
        """
        pointer = await self.pointers.get(strategy_id)
        retained = await self.revisions.count(strategy_id)

        report = IntegrityReport(
            strategy_id=strategy_id,
            pointer_exists=pointer is not None,
            retained_count=retained,
        )

        if pointer is None:
            if retained:
                report.issues.append(
                    f"{retained} revisions stored but no pointer row exists"
                )
        else:
            report.current_revision_id = pointer.current_revision_id
            report.recorded_total = pointer.total_revisions
            current = await self.revisions.get(strategy_id, pointer.current_revision_id)
            report.current_revision_exists = current is not None

            if current is None:
                report.issues.append(
                    f"pointer names missing revision {pointer.current_revision_id}"
                )
            if pointer.total_revisions != retained:
                report.issues.append(
                    f"total_revisions={pointer.total_revisions} "
                    f"but {retained} revisions are stored"
                )

        if report.issues:
            logger.warning(
                f"Integrity issues for strategy {strategy_id}: {'; '.join(report.issues)}"
            )
        return report
