"""Abstract base class for repo-set discovery.

This module defines the RepositorySource interface that maps a root path
to the ordered repositories of the manifest governing it.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from oper.models.repository import Repository


class DiscoveryError(Exception):
    """Raised when no usable repo-set manifest governs a path."""


class RepositorySource(ABC):
    """Abstract base class for repo-set discovery.

    Example:
        >>> source = ProjectListSource()
        >>> for repo in source.discover(Path.cwd()):
        ...     print(repo.rel_path)
    """

    @abstractmethod
    def discover(self, root: Path) -> list[Repository]:
        """Return the repositories of the manifest governing ``root``.

        An empty list is a valid result (manifest without projects).

        Args:
            root: Any path inside the repo-set.

        Returns:
            Repositories in manifest order.

        Raises:
            DiscoveryError: If ``root`` is not inside a repo-set or the
                manifest cannot be read.
        """
