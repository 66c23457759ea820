"""Database module - SQLAlchemy models and database connection"""

from .database import (
    AsyncSessionLocal,
    get_db,
    init_db,
    unit_of_work,
)
from .models import (
    Base,
    StrategyPointerDB,
    StrategyRevisionDB,
)

__all__ = [
    "AsyncSessionLocal",
    "Base",
    "get_db",
    "init_db",
    "unit_of_work",
    "StrategyPointerDB",
    "StrategyRevisionDB",
]
