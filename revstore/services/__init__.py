"""Services module - versioning orchestration and snapshot diffing"""

from .diff import describe_change, generate_diff, summarize_changes
from .versioning import StrategyVersionManager

__all__ = [
    "StrategyVersionManager",
    "describe_change",
    "generate_diff",
    "summarize_changes",
]
