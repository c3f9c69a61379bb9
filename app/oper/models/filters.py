"""Filter criteria applied to commits before merging."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oper.models.commit import Commit

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """History window and optional substring filters.

    Attributes:
        days: Size of the history window in days, counted back from now.
        author: Case-insensitive substring the author name must contain.
        message: Case-insensitive substring the commit message must contain.
    """

    days: int = 10
    author: str | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        """Validate criteria after initialization."""
        if self.days < 0:
            msg = f"History window must not be negative, got {self.days} days"
            raise ValueError(msg)

    def since(self, now: float) -> float:
        """Oldest timestamp still inside the history window."""
        return now - self.days * SECONDS_PER_DAY

    def in_window(self, timestamp: float, now: float) -> bool:
        """Check if a timestamp lies within ``[now - days, now]``."""
        return self.since(now) <= timestamp <= now

    def matches(self, commit: Commit, now: float) -> bool:
        """Check if a commit passes the window and both substring filters.

        Args:
            commit: Commit to test.
            now: Reference time in seconds since the epoch.

        Returns:
            True if the commit should be part of the history.
        """
        if not self.in_window(commit.timestamp, now):
            return False
        if self.author and self.author.casefold() not in commit.author.casefold():
            return False
        return not (self.message and self.message.casefold() not in commit.message.casefold())
