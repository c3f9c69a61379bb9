"""Version-control access.

This module exports the git client and the per-repository log fetcher.
"""

from oper.vcs.client import CommitRecord, GitClient, GitError
from oper.vcs.log import CommitLogFetcher, FetchError

__all__ = ["CommitLogFetcher", "CommitRecord", "FetchError", "GitClient", "GitError"]
