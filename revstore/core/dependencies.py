"""FastAPI dependencies for dependency injection"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.database import get_db
from ..services.versioning import StrategyVersionManager

DbSessionDep = Annotated[AsyncSession, Depends(get_db)]


def get_version_manager(db: DbSessionDep) -> StrategyVersionManager:
    """Versioning service bound to the request's session."""
    return StrategyVersionManager(db)


# Type alias for cleaner route signatures
VersionManagerDep = Annotated[StrategyVersionManager, Depends(get_version_manager)]
