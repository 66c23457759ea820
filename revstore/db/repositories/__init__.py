"""Repository layer for database operations"""

from .pointer import PointerRepository
from .revision import RevisionRepository

__all__ = [
    "PointerRepository",
    "RevisionRepository",
]
