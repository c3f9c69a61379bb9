"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest
from oper.models.commit import Commit, HistoryEntry
from oper.models.repository import Repository
from oper.vcs.client import CommitRecord

# Fixed reference time: 2023-11-14 22:13:20 UTC
NOW = 1_700_000_000


@pytest.fixture
def now() -> float:
    """Reference time used instead of the wall clock."""
    return float(NOW)


@pytest.fixture
def repo_a() -> Repository:
    """Repository named A."""
    return Repository(path=Path("/r/A"), name="A", rel_path="A")


@pytest.fixture
def repo_b() -> Repository:
    """Repository named B."""
    return Repository(path=Path("/r/B"), name="B", rel_path="B")


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Factory for commits with sensible defaults."""

    def _make(
        commit_id: str,
        timestamp: int,
        *,
        repository: Repository | None = None,
        author: str = "Alice Example",
        committer: str = "Alice Example",
        message: str = "Fix flaky build\n\nThe cache key ignored the toolchain.",
        parents: tuple[str, ...] = (),
    ) -> Commit:
        return Commit(
            id=commit_id,
            author=author,
            committer=committer,
            timestamp=timestamp,
            date=datetime.fromtimestamp(timestamp, UTC),
            summary=message.split("\n", 1)[0],
            message=message,
            parents=parents,
            repository=repository,
        )

    return _make


@pytest.fixture
def make_entry(make_commit: Callable[..., Commit]) -> Callable[..., HistoryEntry]:
    """Factory for history entries."""

    def _make(repository: Repository, commit_id: str, timestamp: int, **kwargs: object) -> HistoryEntry:
        commit = make_commit(commit_id, timestamp, repository=repository, **kwargs)
        return HistoryEntry(commit=commit, repository=repository)

    return _make


@pytest.fixture
def make_record() -> Callable[..., CommitRecord]:
    """Factory for raw git log records."""

    def _make(
        commit_id: str,
        timestamp: int,
        *,
        author: str = "Alice Example",
        message: str = "Fix flaky build",
    ) -> CommitRecord:
        return CommitRecord(
            id=commit_id,
            parents=(),
            author=author,
            committer=author,
            timestamp=timestamp,
            date=datetime.fromtimestamp(timestamp, UTC),
            message=message,
        )

    return _make


@pytest.fixture
def mock_git_log_output() -> str:
    """Sample `git log` output using record and unit separators."""
    return (
        "\x1e"
        "1111111111111111111111111111111111111111\x1f"
        "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa\x1f"
        "Alice Example\x1fBob Builder\x1f1699999000\x1f"
        "2023-11-14T23:56:40+01:00\x1f"
        "Add rate limiter\n\nLimits requests per client.\n"
        "\n"
        "\x1e"
        "2222222222222222222222222222222222222222\x1f"
        "bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb cccccccccccccccccccccccccccccccccccccccc\x1f"
        "Carol Dev\x1fCarol Dev\x1f1699990000\x1f"
        "2023-11-14T19:26:40+00:00\x1f"
        "Merge branch 'feature'\n"
        "\n"
    )


@pytest.fixture
def repo_set(tmp_path: Path) -> Path:
    """A repo-set checkout with two projects and a blank line in project.list."""
    repo_dir = tmp_path / ".repo"
    repo_dir.mkdir()
    (repo_dir / "project.list").write_text("platform/build\n\ntools/repo\n", encoding="utf-8")
    (tmp_path / "platform" / "build").mkdir(parents=True)
    (tmp_path / "tools" / "repo").mkdir(parents=True)
    return tmp_path
