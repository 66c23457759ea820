"""Versioned revision store for strategy checklists"""

__version__ = "0.1.0"
