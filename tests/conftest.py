"""
Pytest configuration and fixtures for REVSTORE tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from revstore.db.models import Base
from revstore.models.strategy import StrategySnapshot
from revstore.services.versioning import StrategyVersionManager


# Use an in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def version_manager(db_session: AsyncSession) -> StrategyVersionManager:
    """Versioning service bound to the test session."""
    return StrategyVersionManager(db_session)


@pytest.fixture
def sample_snapshot() -> dict:
    """A small strategy checklist."""
    return {
        "name": "Breakout Checklist",
        "conditions": [
            {"id": 1, "text": "Price above 200 EMA", "importance": "high"},
            {"id": 2, "text": "Volume spike on breakout", "importance": "medium"},
            {"id": 3, "text": "No major news within 1h", "importance": "low"},
        ],
    }


@pytest.fixture
def snapshot_a() -> StrategySnapshot:
    return StrategySnapshot.model_validate({
        "name": "X",
        "conditions": [{"id": 1, "text": "a", "importance": "high"}],
    })


@pytest.fixture
def snapshot_b() -> StrategySnapshot:
    return StrategySnapshot.model_validate({
        "name": "Y",
        "conditions": [
            {"id": 1, "text": "a", "importance": "low"},
            {"id": 2, "text": "b", "importance": "medium"},
        ],
    })
