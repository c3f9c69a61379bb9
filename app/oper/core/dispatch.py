"""Custom command dispatch.

Custom commands are external programs bound to keys in the configuration.
They run against the selected commit: the commit id is substituted into
the argument template and the program starts inside the commit's
repository, detached from oper's terminal.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from oper.core.config import COMMIT_PLACEHOLDER, CustomCommand
from oper.utils.shell import spawn_detached

if TYPE_CHECKING:
    from oper.models.commit import HistoryEntry

logger = logging.getLogger(__name__)


class DispatchError(Exception):
    """Raised when a custom command cannot be started."""


def build_argv(command: CustomCommand, commit_id: str) -> list[str]:
    """Expand a command's argument template for a commit.

    The template is split like a shell command line, then every "{}" in
    every token is replaced with the commit id.

    Args:
        command: Custom command to expand.
        commit_id: Id of the selected commit.

    Returns:
        Arguments following the executable.

    Raises:
        DispatchError: If the template cannot be split (unbalanced quotes).
    """
    if not command.args:
        return []
    try:
        tokens = shlex.split(command.args)
    except ValueError as e:
        raise DispatchError(f"Invalid arguments for '{command.executable}': {e}") from e
    return [token.replace(COMMIT_PLACEHOLDER, commit_id) for token in tokens]


class CommandDispatcher:
    """Starts custom commands bound to keys.

    Args:
        commands: Custom commands, keyed by trigger key or as a sequence.
    """

    def __init__(self, commands: Mapping[str, CustomCommand] | Iterable[CustomCommand] = ()) -> None:
        if isinstance(commands, Mapping):
            table = dict(commands)
        else:
            table = {command.key: command for command in commands}
        self._commands: MappingProxyType[str, CustomCommand] = MappingProxyType(table)

    @property
    def commands(self) -> MappingProxyType[str, CustomCommand]:
        """Read-only key to command table."""
        return self._commands

    @property
    def keys(self) -> frozenset[str]:
        """Keys bound to custom commands."""
        return frozenset(self._commands)

    def dispatch(self, key: str, entry: HistoryEntry) -> int:
        """Start the command bound to ``key`` for a history entry.

        Fire-and-forget: the process is not waited for and its output is
        discarded.

        Args:
            key: Trigger key.
            entry: Selected history entry.

        Returns:
            PID of the started process.

        Raises:
            DispatchError: If no command is bound or it cannot be started.
        """
        command = self._commands.get(key)
        if command is None:
            raise DispatchError(f"No custom command bound to '{key}'")

        argv = [command.executable, *build_argv(command, entry.commit.id)]
        cwd = str(entry.repository.path)
        try:
            pid = spawn_detached(argv, cwd=cwd)
        except OSError as e:
            raise DispatchError(f"Failed to start '{command.executable}': {e}") from e

        logger.debug("Started %s (pid %d) in %s", argv, pid, cwd)
        return pid
