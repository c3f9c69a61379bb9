"""Commit and history entry models.

This module defines the immutable records produced by the fetch phase
and consumed by the merge and the terminal UI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oper.models.repository import Repository


@dataclass(frozen=True, slots=True)
class Commit:
    """A single commit read from one repository.

    Attributes:
        id: Full hex object id, unique within its repository.
        author: Author name.
        committer: Committer name.
        timestamp: Commit time in seconds since the epoch (UTC).
        date: Commit time with the committer's UTC offset, for display.
        summary: First line of the message.
        message: Full commit message.
        parents: Ids of the parent commits.
        repository: Owning repository (back-reference, not part of equality).
    """

    id: str
    author: str
    committer: str
    timestamp: int
    date: datetime
    summary: str
    message: str
    parents: tuple[str, ...] = field(default=())
    repository: Repository | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Validate commit data after initialization."""
        if not self.id:
            msg = "Commit id cannot be empty"
            raise ValueError(msg)

    @property
    def short_id(self) -> str:
        """Abbreviated commit id."""
        return self.id[:10]

    @property
    def time_as_str(self) -> str:
        """Commit time formatted as ``YYYY-MM-DD HH:MM +HHMM``."""
        return self.date.strftime("%Y-%m-%d %H:%M %z")


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """A commit paired with the repository it belongs to.

    This is the unit the history list scrolls over.
    """

    commit: Commit
    repository: Repository

    @property
    def sort_key(self) -> tuple[int, str, str, str]:
        """Key ordering entries newest first with a deterministic tie-break.

        Equal timestamps are ordered by repository name, then commit id.
        The repository path only separates identically named repositories.
        """
        return (
            -self.commit.timestamp,
            self.repository.name,
            self.commit.id,
            str(self.repository.path),
        )
