"""Data models for oper.

This module exports the core data structures used throughout the application.
"""

from oper.models.commit import Commit, HistoryEntry
from oper.models.filters import FilterCriteria
from oper.models.history import History
from oper.models.repository import Repository

__all__ = [
    "Commit",
    "FilterCriteria",
    "History",
    "HistoryEntry",
    "Repository",
]
