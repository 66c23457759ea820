"""
Tests for database repository layer.

Covers: RevisionRepository (append-only log), PointerRepository
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from revstore.db.models import StrategyRevisionDB
from revstore.db.repositories import PointerRepository, RevisionRepository
from revstore.models.strategy import StrategySnapshot, StrategyStats


# ============================================================================
# RevisionRepository Tests
# ============================================================================

class TestRevisionRepository:
    """Tests for RevisionRepository"""

    @pytest.mark.asyncio
    async def test_append(self, db_session: AsyncSession, sample_snapshot: dict):
        """Test appending a revision"""
        repo = RevisionRepository(db_session)

        row = await repo.append(
            "strat-1",
            StrategySnapshot.model_validate(sample_snapshot),
            change_description="initial",
            timestamp=1_000,
        )

        assert row.id is not None
        assert row.strategy_id == "strat-1"
        assert row.revision_id.startswith("rev_1000_")
        assert row.timestamp == 1_000
        assert row.data == sample_snapshot
        assert row.change_description == "initial"
        assert row.user_id is None

    @pytest.mark.asyncio
    async def test_append_stores_a_copy(self, db_session: AsyncSession, sample_snapshot: dict):
        """Test that the stored data is independent of the input object"""
        repo = RevisionRepository(db_session)
        snapshot = StrategySnapshot.model_validate(sample_snapshot)

        row = await repo.append("strat-1", snapshot)
        snapshot.conditions[0].text = "changed after save"

        assert row.data["conditions"][0]["text"] == "Price above 200 EMA"

    @pytest.mark.asyncio
    async def test_sequence_numbers_increase(self, db_session: AsyncSession, snapshot_a):
        """Test local sequence numbers are monotonic"""
        repo = RevisionRepository(db_session)

        first = await repo.append("strat-1", snapshot_a)
        second = await repo.append("strat-1", snapshot_a)
        third = await repo.append("strat-2", snapshot_a)

        assert first.id < second.id < third.id

    @pytest.mark.asyncio
    async def test_history_newest_first(self, db_session: AsyncSession, snapshot_a):
        """Test history ordering by timestamp"""
        repo = RevisionRepository(db_session)

        await repo.append("strat-1", snapshot_a, timestamp=100)
        await repo.append("strat-1", snapshot_a, timestamp=300)
        await repo.append("strat-1", snapshot_a, timestamp=200)

        history = await repo.history("strat-1")

        assert [row.timestamp for row in history] == [300, 200, 100]

    @pytest.mark.asyncio
    async def test_history_tie_break_by_sequence(self, db_session: AsyncSession, snapshot_a):
        """Test same-millisecond saves are ordered by sequence number"""
        repo = RevisionRepository(db_session)

        first = await repo.append("strat-1", snapshot_a, timestamp=500)
        second = await repo.append("strat-1", snapshot_a, timestamp=500)
        third = await repo.append("strat-1", snapshot_a, timestamp=500)

        history = await repo.history("strat-1")

        assert [row.id for row in history] == [third.id, second.id, first.id]

    @pytest.mark.asyncio
    async def test_history_pagination(self, db_session: AsyncSession, snapshot_a):
        """Test limit/offset"""
        repo = RevisionRepository(db_session)
        for ts in range(1, 6):
            await repo.append("strat-1", snapshot_a, timestamp=ts)

        page = await repo.history("strat-1", limit=2, offset=1)

        assert [row.timestamp for row in page] == [4, 3]

    @pytest.mark.asyncio
    async def test_history_unknown_strategy(self, db_session: AsyncSession):
        """Test empty history is not an error"""
        repo = RevisionRepository(db_session)

        assert await repo.history("missing") == []

    @pytest.mark.asyncio
    async def test_history_is_scoped_to_strategy(self, db_session: AsyncSession, snapshot_a):
        repo = RevisionRepository(db_session)
        await repo.append("strat-1", snapshot_a)
        await repo.append("strat-2", snapshot_a)

        history = await repo.history("strat-1")

        assert len(history) == 1
        assert history[0].strategy_id == "strat-1"

    @pytest.mark.asyncio
    async def test_get(self, db_session: AsyncSession, snapshot_a):
        """Test compound-key lookup"""
        repo = RevisionRepository(db_session)
        row = await repo.append("strat-1", snapshot_a)

        found = await repo.get("strat-1", row.revision_id)

        assert found is not None
        assert found.id == row.id

    @pytest.mark.asyncio
    async def test_get_wrong_strategy(self, db_session: AsyncSession, snapshot_a):
        """Test revision ids are only found under their own strategy"""
        repo = RevisionRepository(db_session)
        row = await repo.append("strat-1", snapshot_a)

        assert await repo.get("strat-2", row.revision_id) is None
        assert await repo.get("strat-1", "rev_does_not_exist") is None

    @pytest.mark.asyncio
    async def test_duplicate_revision_id_rejected(self, db_session: AsyncSession, snapshot_a):
        """Test the compound key is unique at the storage layer"""
        db_session.add(StrategyRevisionDB(
            strategy_id="strat-1", revision_id="rev_x", timestamp=1, data=snapshot_a.to_storage(),
        ))
        await db_session.flush()

        db_session.add(StrategyRevisionDB(
            strategy_id="strat-1", revision_id="rev_x", timestamp=2, data=snapshot_a.to_storage(),
        ))
        with pytest.raises(IntegrityError):
            await db_session.flush()

    @pytest.mark.asyncio
    async def test_count(self, db_session: AsyncSession, snapshot_a):
        repo = RevisionRepository(db_session)
        await repo.append("strat-1", snapshot_a)
        await repo.append("strat-1", snapshot_a)

        assert await repo.count("strat-1") == 2
        assert await repo.count("strat-2") == 0

    @pytest.mark.asyncio
    async def test_purge(self, db_session: AsyncSession, snapshot_a):
        """Test purge removes only the target strategy"""
        repo = RevisionRepository(db_session)
        await repo.append("strat-1", snapshot_a)
        await repo.append("strat-1", snapshot_a)
        await repo.append("strat-2", snapshot_a)

        removed = await repo.purge("strat-1")

        assert removed == 2
        assert await repo.history("strat-1") == []
        assert len(await repo.history("strat-2")) == 1

    @pytest.mark.asyncio
    async def test_purge_is_idempotent(self, db_session: AsyncSession):
        repo = RevisionRepository(db_session)

        assert await repo.purge("missing") == 0
        assert await repo.purge("missing") == 0


# ============================================================================
# PointerRepository Tests
# ============================================================================

class TestPointerRepository:
    """Tests for PointerRepository"""

    @pytest.mark.asyncio
    async def test_upsert_creates(self, db_session: AsyncSession):
        """Test first save creates the pointer row"""
        repo = PointerRepository(db_session)

        pointer = await repo.upsert_on_save("strat-1", "rev_a", 1_000)

        assert pointer.current_revision_id == "rev_a"
        assert pointer.created_at == 1_000
        assert pointer.updated_at == 1_000
        assert pointer.total_revisions == 1

    @pytest.mark.asyncio
    async def test_upsert_advances(self, db_session: AsyncSession):
        """Test subsequent saves move the pointer and count up"""
        repo = PointerRepository(db_session)
        await repo.upsert_on_save("strat-1", "rev_a", 1_000)

        pointer = await repo.upsert_on_save("strat-1", "rev_b", 2_000)

        assert pointer.current_revision_id == "rev_b"
        assert pointer.created_at == 1_000
        assert pointer.updated_at == 2_000
        assert pointer.total_revisions == 2

    @pytest.mark.asyncio
    async def test_set_current_keeps_total(self, db_session: AsyncSession):
        """Test set_current does not touch total_revisions"""
        repo = PointerRepository(db_session)
        await repo.upsert_on_save("strat-1", "rev_a", 1_000)
        await repo.upsert_on_save("strat-1", "rev_b", 2_000)

        moved = await repo.set_current("strat-1", "rev_a", 3_000)
        pointer = await repo.get("strat-1")

        assert moved is True
        assert pointer.current_revision_id == "rev_a"
        assert pointer.updated_at == 3_000
        assert pointer.total_revisions == 2

    @pytest.mark.asyncio
    async def test_set_current_without_pointer(self, db_session: AsyncSession):
        repo = PointerRepository(db_session)

        assert await repo.set_current("missing", "rev_a", 1) is False
        assert await repo.get("missing") is None

    @pytest.mark.asyncio
    async def test_stats(self, db_session: AsyncSession):
        repo = PointerRepository(db_session)
        await repo.upsert_on_save("strat-1", "rev_a", 1_000)
        await repo.upsert_on_save("strat-1", "rev_b", 2_500)

        stats = await repo.stats("strat-1")

        assert stats == StrategyStats(total_revisions=2, first_created=1_000, last_modified=2_500)

    @pytest.mark.asyncio
    async def test_stats_not_found(self, db_session: AsyncSession):
        repo = PointerRepository(db_session)

        assert await repo.stats("missing") is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, db_session: AsyncSession):
        repo = PointerRepository(db_session)
        await repo.upsert_on_save("strat-1", "rev_a", 1_000)

        assert await repo.delete("strat-1") is True
        assert await repo.delete("strat-1") is False
        assert await repo.get("strat-1") is None
