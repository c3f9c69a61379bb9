"""Per-repository commit log fetching.

The fetcher turns a repository's git log into a newest-first stream of
commits inside the history window, filtered by author and message.
"""

import logging
import time
from collections.abc import Iterator

from oper.models.commit import Commit
from oper.models.filters import FilterCriteria
from oper.models.repository import Repository
from oper.vcs.client import CommitRecord, GitClient, GitError

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when the log of a single repository cannot be read.

    Attributes:
        repository: Repository whose log failed.
        reason: Human-readable failure description.
    """

    def __init__(self, repository: Repository, reason: str) -> None:
        self.repository = repository
        self.reason = reason
        super().__init__(f"{repository.rel_path}: {reason}")


class CommitLogFetcher:
    """Fetches the filtered, newest-first history of one repository.

    Example:
        >>> fetcher = CommitLogFetcher(repo, FilterCriteria(days=7))
        >>> for commit in fetcher.fetch():
        ...     print(commit.short_id, commit.summary)
    """

    def __init__(
        self,
        repository: Repository,
        criteria: FilterCriteria,
        client: GitClient | None = None,
        now: float | None = None,
    ) -> None:
        self.repository = repository
        self.criteria = criteria
        self.client = client or GitClient()
        self.now = time.time() if now is None else now

    def fetch(self) -> Iterator[Commit]:
        """Yield matching commits, newest first.

        Commits with equal timestamps are ordered by id.

        Yields:
            Commit instances bound to this fetcher's repository.

        Raises:
            FetchError: If the repository log cannot be read.
        """
        try:
            records = self.client.list_commits(self.repository.path, self.criteria.since(self.now))
        except GitError as e:
            raise FetchError(self.repository, str(e)) from e

        commits = [self._to_commit(record) for record in records]
        matching = [c for c in commits if self.criteria.matches(c, self.now)]
        logger.debug(
            "%s: %d of %d commit(s) match", self.repository.rel_path, len(matching), len(commits)
        )

        matching.sort(key=lambda c: (-c.timestamp, c.id))
        yield from matching

    def _to_commit(self, record: CommitRecord) -> Commit:
        summary = record.message.split("\n", 1)[0].strip()
        return Commit(
            id=record.id,
            author=record.author,
            committer=record.committer,
            timestamp=record.timestamp,
            date=record.date,
            summary=summary,
            message=record.message,
            parents=record.parents,
            repository=self.repository,
        )
