"""Multi-repository history aggregation.

Fetching is the only parallel phase: every repository's log is read by
its own task into its own buffer. Once all tasks have finished (or
failed) the buffers are merged on the calling thread, so the ordering
logic stays sequential and reproducible.
"""

from __future__ import annotations

import heapq
import logging
import time
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from oper.models.commit import Commit, HistoryEntry
from oper.models.history import History
from oper.vcs.log import CommitLogFetcher, FetchError

if TYPE_CHECKING:
    from oper.models.filters import FilterCriteria
    from oper.models.repository import Repository
    from oper.vcs.client import GitClient

logger = logging.getLogger(__name__)

# Called once per finished repository with the failure, if any
ProgressCallback = Callable[["Repository", FetchError | None], None]

DEFAULT_MAX_WORKERS = 8


def merge_histories(streams: Iterable[Iterable[HistoryEntry]]) -> list[HistoryEntry]:
    """Merge newest-first streams into one newest-first list.

    A k-way merge over the stream heads: the head with the largest
    timestamp is emitted and its stream advanced; exhausted streams drop
    out. Equal timestamps are ordered by repository name, then commit id.

    Args:
        streams: Per-repository entry sequences, each already newest first.

    Returns:
        All entries in global order.
    """
    iterators: list[Iterator[HistoryEntry]] = [iter(stream) for stream in streams]
    heap: list[tuple[tuple[int, str, str, str], int, HistoryEntry]] = []

    for index, iterator in enumerate(iterators):
        head = next(iterator, None)
        if head is not None:
            heap.append((head.sort_key, index, head))
    heapq.heapify(heap)

    merged: list[HistoryEntry] = []
    while heap:
        _, index, entry = heap[0]
        merged.append(entry)
        following = next(iterators[index], None)
        if following is None:
            heapq.heappop(heap)
        else:
            heapq.heapreplace(heap, (following.sort_key, index, following))
    return merged


def _entries(repository: Repository, commits: Iterable[Commit]) -> list[HistoryEntry]:
    return [HistoryEntry(commit=commit, repository=repository) for commit in commits]


def build_history(
    repositories: Iterable[Repository],
    criteria: FilterCriteria,
    *,
    client: GitClient | None = None,
    now: float | None = None,
    max_workers: int | None = None,
    on_progress: ProgressCallback | None = None,
) -> History:
    """Fetch every repository's log concurrently and merge the results.

    A repository whose log cannot be read contributes no commits; the
    failure is logged and recorded in ``History.failures``.

    Args:
        repositories: Repositories of the repo-set, in manifest order.
        criteria: History window and filters applied to every repository.
        client: Git client shared by all fetchers.
        now: Reference time in seconds since the epoch. Defaults to now.
        max_workers: Upper bound of concurrent fetches.
        on_progress: Called on the calling thread per finished repository.

    Returns:
        The merged History.
    """
    repos = tuple(repositories)
    reference = time.time() if now is None else now
    buffers: list[list[HistoryEntry]] = [[] for _ in repos]
    failures: dict[int, FetchError] = {}

    if repos:
        workers = max(1, min(max_workers or DEFAULT_MAX_WORKERS, len(repos)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="oper-fetch") as pool:
            futures: dict[Future[list[HistoryEntry]], int] = {
                pool.submit(_fetch_entries, repo, criteria, client, reference): index
                for index, repo in enumerate(repos)
            }
            for future in as_completed(futures):
                index = futures[future]
                error: FetchError | None = None
                try:
                    buffers[index] = future.result()
                except FetchError as e:
                    error = e
                    failures[index] = e
                    logger.warning("Skipping %s: %s", repos[index].rel_path, e.reason)
                if on_progress is not None:
                    on_progress(repos[index], error)

    entries = merge_histories(buffers)
    logger.debug(
        "Merged %d commit(s) from %d repositories (%d failed)",
        len(entries),
        len(repos),
        len(failures),
    )
    return History(
        repositories=repos,
        entries=entries,
        failures=[failures[index] for index in sorted(failures)],
    )


def _fetch_entries(
    repository: Repository,
    criteria: FilterCriteria,
    client: GitClient | None,
    now: float,
) -> list[HistoryEntry]:
    fetcher = CommitLogFetcher(repository, criteria, client=client, now=now)
    return _entries(repository, fetcher.fetch())
