"""Data models for strategy snapshots, revisions, and diffs"""

from .strategy import (
    Change,
    ChangeType,
    Condition,
    Importance,
    IntegrityReport,
    Revision,
    StrategySnapshot,
    StrategyStats,
)

__all__ = [
    "Change",
    "ChangeType",
    "Condition",
    "Importance",
    "IntegrityReport",
    "Revision",
    "StrategySnapshot",
    "StrategyStats",
]
