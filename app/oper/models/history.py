"""Merged multi-repository history model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oper.models.commit import HistoryEntry
    from oper.models.repository import Repository
    from oper.vcs.log import FetchError


@dataclass(frozen=True, slots=True)
class History:
    """Result of fetching and merging the history of a repo-set.

    Attributes:
        repositories: All repositories of the repo-set, in manifest order.
        entries: Commits of all repositories, newest first.
        failures: Repositories whose log could not be read.
    """

    repositories: tuple[Repository, ...]
    entries: list[HistoryEntry] = field(default_factory=lambda: [])
    failures: list[FetchError] = field(default_factory=lambda: [])

    @property
    def commit_count(self) -> int:
        """Number of merged commits."""
        return len(self.entries)

    @property
    def repository_count(self) -> int:
        """Number of repositories in the repo-set."""
        return len(self.repositories)

    @property
    def is_empty(self) -> bool:
        """Check if no commit matched."""
        return not self.entries
