"""Read-only access to git repositories through the git CLI.

Log output is requested with ASCII record/unit separators so commit
messages can contain any printable text without breaking parsing.
"""

import logging
import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import NamedTuple

from oper.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "\x1e"
UNIT_SEPARATOR = "\x1f"

# id, parents, author name, committer name, committer time (epoch), committer
# time (strict ISO 8601), raw message
_LOG_FORMAT = "%x1e%H%x1f%P%x1f%an%x1f%cn%x1f%ct%x1f%cI%x1f%B"
_LOG_FIELDS = 7


class GitError(Exception):
    """Raised when a git command cannot be run or fails."""


class CommitRecord(NamedTuple):
    """Raw commit data as reported by `git log`."""

    id: str
    parents: tuple[str, ...]
    author: str
    committer: str
    timestamp: int
    date: datetime
    message: str


class GitClient:
    """Runs read-only git queries against a working tree.

    Args:
        executable: git executable name or path.
        timeout: Maximum time in seconds for a single git call.
    """

    def __init__(self, executable: str = "git", timeout: float = 60.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if the git executable can be found."""
        return command_exists(self.executable)

    def _git(self, path: Path, *args: str) -> str:
        """Run a git subcommand inside ``path`` and return its stdout.

        Raises:
            GitError: If git is missing, times out, or exits non-zero.
        """
        cmd = [self.executable, "-C", str(path), *args]
        try:
            result = run_command(cmd, timeout=self.timeout)
        except FileNotFoundError as e:
            raise GitError(f"{self.executable} not found") from e
        except subprocess.TimeoutExpired as e:
            raise GitError(f"{' '.join(args[:1])} timed out after {self.timeout:.0f}s") from e
        except OSError as e:
            raise GitError(str(e)) from e

        if not result.success:
            msg = result.stderr.strip() or f"exit code {result.returncode}"
            raise GitError(f"git {args[0]} failed: {msg}")
        return result.stdout

    def list_commits(self, path: Path, since: float) -> list[CommitRecord]:
        """List commits reachable from HEAD committed at or after ``since``.

        Args:
            path: Repository working tree.
            since: Oldest commit time of interest, seconds since the epoch.

        Returns:
            Commit records in the order reported by git (newest first).

        Raises:
            GitError: If the log cannot be read.
        """
        since_str = format_since(since)
        stdout = self._git(
            path,
            "log",
            "--no-color",
            f"--since={since_str}",
            f"--format={_LOG_FORMAT}",
            "HEAD",
            "--",
        )
        records: list[CommitRecord] = []
        for chunk in stdout.split(RECORD_SEPARATOR):
            if not chunk.strip():
                continue
            record = parse_log_record(chunk)
            if record is not None:
                records.append(record)
        return records

    def get_diff(self, path: Path, commit_id: str) -> str:
        """Return the patch introduced by a commit.

        Args:
            path: Repository working tree.
            commit_id: Commit to show.

        Returns:
            Patch text (empty for commits without changes).

        Raises:
            GitError: If the commit cannot be shown.
        """
        return self._git(path, "show", "--no-color", "--format=", "--patch", commit_id, "--")


def format_since(since: float) -> str:
    """Format a ``--since`` bound in UTC.

    Bounds before the epoch are clamped to it; git has no older commits to
    offer and such dates cannot be represented.

    Raises:
        GitError: If the bound cannot be converted to a date.
    """
    try:
        bound = datetime.fromtimestamp(max(since, 0), UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise GitError(f"Invalid history window start {since!r}: {e}") from e
    return bound.strftime("%Y-%m-%d %H:%M:%S +0000")


def parse_log_record(chunk: str) -> CommitRecord | None:
    """Parse one record of `git log` output.

    Args:
        chunk: Text between two record separators.

    Returns:
        CommitRecord if parsing succeeds, None otherwise.
    """
    parts = chunk.lstrip("\n").split(UNIT_SEPARATOR, _LOG_FIELDS - 1)
    if len(parts) != _LOG_FIELDS:
        logger.debug("Skipping malformed log record (parts=%d): %r", len(parts), chunk[:100])
        return None

    commit_id, parents, author, committer, timestamp, iso_date, message = parts
    commit_id = commit_id.strip()
    if not commit_id:
        logger.debug("Skipping log record without id: %r", chunk[:100])
        return None

    try:
        epoch = int(timestamp)
        date = datetime.fromisoformat(iso_date.strip())
    except ValueError:
        logger.debug("Skipping log record with bad date: %r", chunk[:100])
        return None

    return CommitRecord(
        id=commit_id,
        parents=tuple(parents.split()),
        author=author,
        committer=committer,
        timestamp=epoch,
        date=date,
        message=message.rstrip("\n"),
    )
