"""Diff rendering with a bounded LRU cache.

Renders are requested from worker threads while the UI keeps running, so
the cache is guarded by a lock.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from pathlib import Path
from typing import TYPE_CHECKING

from oper.vcs.client import GitClient, GitError

if TYPE_CHECKING:
    from oper.models.commit import HistoryEntry

logger = logging.getLogger(__name__)

DiffKey = tuple[Path, str]


class RenderError(Exception):
    """Raised when the diff of a commit cannot be retrieved."""


class DiffCache:
    """Least-recently-used cache of rendered diffs.

    Keys are ``(repository path, commit id)`` pairs since commit ids are
    only unique within a repository.

    Args:
        capacity: Maximum number of cached diffs (at least 1).
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            msg = f"Cache capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._items: OrderedDict[DiffKey, str] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        """Maximum number of cached diffs."""
        return self._capacity

    def get(self, key: DiffKey) -> str | None:
        """Return a cached diff and mark it most recently used."""
        with self._lock:
            text = self._items.get(key)
            if text is not None:
                self._items.move_to_end(key)
            return text

    def put(self, key: DiffKey, text: str) -> None:
        """Store a diff, evicting the least recently used ones beyond capacity."""
        with self._lock:
            self._items[key] = text
            self._items.move_to_end(key)
            while len(self._items) > self._capacity:
                evicted, _ = self._items.popitem(last=False)
                logger.debug("Evicted diff of %s from cache", evicted[1])

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class DiffRenderer:
    """Retrieves and formats commit diffs, memoized in a DiffCache.

    Args:
        client: Git client used to retrieve patches.
        cache: Cache to use. Created with ``capacity`` if omitted.
        capacity: Capacity of the created cache.
    """

    def __init__(
        self,
        client: GitClient | None = None,
        cache: DiffCache | None = None,
        capacity: int = 32,
    ) -> None:
        self.client = client or GitClient()
        self.cache = cache if cache is not None else DiffCache(capacity)

    @staticmethod
    def cache_key(entry: HistoryEntry) -> DiffKey:
        """Cache key of an entry."""
        return (entry.repository.path, entry.commit.id)

    def is_cached(self, entry: HistoryEntry) -> bool:
        """Check if the diff of an entry is cached (without touching recency)."""
        return self.cache_key(entry) in self.cache

    def render(self, entry: HistoryEntry) -> str:
        """Return the formatted diff of an entry.

        A cached diff is returned without any I/O.

        Args:
            entry: History entry to render.

        Returns:
            Header, message and patch as text.

        Raises:
            RenderError: If the patch cannot be retrieved.
        """
        key = self.cache_key(entry)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            patch = self.client.get_diff(entry.repository.path, entry.commit.id)
        except GitError as e:
            raise RenderError(f"Failed to load diff of {entry.commit.short_id}: {e}") from e

        text = format_diff(entry, patch)
        self.cache.put(key, text)
        return text


def format_diff(entry: HistoryEntry, patch: str) -> str:
    """Format a commit header, its message and its patch.

    Args:
        entry: History entry the patch belongs to.
        patch: Patch text as printed by git.

    Returns:
        Text shown in the diff pane.
    """
    commit = entry.commit
    lines = [
        f"Repo:       {entry.repository.rel_path}",
        f"Id:         {commit.id}",
        f"Author:     {commit.author}",
        f"Committer:  {commit.committer}",
        f"CommitDate: {commit.time_as_str}",
        "",
        *commit.message.splitlines(),
        "---",
    ]
    body = patch.rstrip("\n")
    if body:
        lines.extend(body.splitlines())
    else:
        lines.append("(no changes)")
    return "\n".join(lines)
