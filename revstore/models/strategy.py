"""
Strategy snapshot and revision models.

A strategy is a named, ordered list of weighted conditions. Every saved
state of a strategy is kept as an immutable revision; a per-strategy
pointer names the revision that is currently active.

These are the value objects handed to and returned by the versioning
service. ORM rows never leave the service layer, so callers cannot
mutate stored history through a returned object.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field


# =============================================================================
# Enums
# =============================================================================

class Importance(str, Enum):
    """Condition weight"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ChangeType(str, Enum):
    """Kind of structural change between two snapshots"""
    NAME_CHANGED = "name_changed"
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


# =============================================================================
# Snapshot
# =============================================================================

class Condition(BaseModel):
    """
    One checklist condition.

    ``id`` is assigned by the caller and stays stable across revisions of
    the same strategy; the diff engine matches conditions on it.
    """
    id: int
    text: str
    importance: Importance


class StrategySnapshot(BaseModel):
    """The payload committed into a revision"""
    name: str
    conditions: list[Condition] = Field(default_factory=list)

    def to_storage(self) -> dict:
        """Plain JSON-compatible copy for persistence."""
        return self.model_dump(mode="json")


# =============================================================================
# Stored records
# =============================================================================

class Revision(BaseModel):
    """Immutable stored copy of a snapshot"""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Local sequence number")
    strategy_id: str
    revision_id: str
    timestamp: int = Field(..., description="Creation instant, ms since epoch")
    data: StrategySnapshot
    change_description: Optional[str] = None
    user_id: Optional[str] = None


class StrategyStats(BaseModel):
    """Bookkeeping counters from the pointer table"""
    total_revisions: int
    first_created: int
    last_modified: int


class Change(BaseModel):
    """One entry of a structural diff"""
    type: ChangeType
    field: str
    old_value: Optional[Union[Condition, str]] = None
    new_value: Optional[Union[Condition, str]] = None


class IntegrityReport(BaseModel):
    """Cross-table consistency of one strategy's history"""
    strategy_id: str
    pointer_exists: bool
    current_revision_id: Optional[str] = None
    current_revision_exists: bool = False
    recorded_total: int = 0
    retained_count: int = 0
    issues: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def is_consistent(self) -> bool:
        return not self.issues
