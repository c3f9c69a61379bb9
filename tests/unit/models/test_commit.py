"""Unit tests for commit and history entry models."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from oper.models.commit import Commit, HistoryEntry
from oper.models.repository import Repository


class TestCommit:
    """Tests for Commit dataclass."""

    def test_empty_id_rejected(self, make_commit: Callable[..., Commit]) -> None:
        """Commit requires an id."""
        with pytest.raises(ValueError, match="id cannot be empty"):
            make_commit("", 100)

    def test_short_id(self, make_commit: Callable[..., Commit]) -> None:
        """short_id abbreviates to ten characters."""
        commit = make_commit("0123456789abcdef", 100)
        assert commit.short_id == "0123456789"

    def test_time_as_str_keeps_offset(self) -> None:
        """time_as_str shows the committer's UTC offset."""
        date = datetime(2024, 3, 1, 14, 5, tzinfo=timezone(timedelta(hours=2)))
        commit = Commit(
            id="abc",
            author="a",
            committer="c",
            timestamp=int(date.timestamp()),
            date=date,
            summary="s",
            message="s",
        )
        assert commit.time_as_str == "2024-03-01 14:05 +0200"

    def test_repository_not_part_of_equality(
        self, make_commit: Callable[..., Commit], repo_a: Repository, repo_b: Repository
    ) -> None:
        """The repository back-reference does not affect equality."""
        assert make_commit("a", 1, repository=repo_a) == make_commit("a", 1, repository=repo_b)


class TestHistoryEntrySortKey:
    """Tests for HistoryEntry.sort_key ordering."""

    def test_newer_sorts_first(
        self, make_entry: Callable[..., HistoryEntry], repo_a: Repository
    ) -> None:
        """Larger timestamps sort before smaller ones."""
        newer = make_entry(repo_a, "x", 200)
        older = make_entry(repo_a, "y", 100)
        assert sorted([older, newer], key=lambda e: e.sort_key) == [newer, older]

    def test_tie_broken_by_repository_name(
        self,
        make_entry: Callable[..., HistoryEntry],
        repo_a: Repository,
        repo_b: Repository,
    ) -> None:
        """Equal timestamps are ordered by repository name."""
        from_b = make_entry(repo_b, "0000", 100)
        from_a = make_entry(repo_a, "ffff", 100)
        assert sorted([from_b, from_a], key=lambda e: e.sort_key) == [from_a, from_b]

    def test_tie_broken_by_commit_id(
        self, make_entry: Callable[..., HistoryEntry], repo_a: Repository
    ) -> None:
        """Equal timestamp and repository name fall back to the commit id."""
        second = make_entry(repo_a, "bbbb", 100)
        first = make_entry(repo_a, "aaaa", 100)
        assert sorted([second, first], key=lambda e: e.sort_key) == [first, second]

    def test_same_name_different_path(self, make_entry: Callable[..., HistoryEntry]) -> None:
        """Identically named repositories are told apart by path."""
        left = Repository(path=Path("/x/lib"), name="lib", rel_path="x/lib")
        right = Repository(path=Path("/y/lib"), name="lib", rel_path="y/lib")
        assert make_entry(left, "a", 1).sort_key < make_entry(right, "a", 1).sort_key
