"""Shared Rich display functions for the command line.

Provides the fetch progress display and the reporting of repositories
whose history could not be read.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from oper.utils.formatting import err_console, print_warning

if TYPE_CHECKING:
    from oper.core.history import ProgressCallback
    from oper.models.history import History
    from oper.models.repository import Repository
    from oper.vcs.log import FetchError


@contextmanager
def fetch_progress(total: int) -> Iterator[ProgressCallback]:
    """Show a transient progress bar while repositories are scanned.

    Args:
        total: Number of repositories to scan.

    Yields:
        Callback advancing the bar by one finished repository.
    """
    progress = Progress(
        SpinnerColumn(style="info"),
        TextColumn("Scanned"),
        MofNCompleteColumn(),
        TextColumn("repositories"),
        BarColumn(complete_style="success"),
        console=err_console,
        transient=True,
    )
    with progress:
        task = progress.add_task("scan", total=total)

        def advance(repository: Repository, error: FetchError | None) -> None:
            progress.advance(task)

        yield advance


def print_fetch_failures(history: History) -> None:
    """Print one warning per repository whose log could not be read.

    Args:
        history: Merged history carrying the failures.
    """
    for failure in history.failures:
        print_warning(f"Failed to read history of {failure.repository.rel_path}: {failure.reason}")
