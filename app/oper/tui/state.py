"""Navigation state machine of the history browser.

The state machine owns the view state (selection, scroll offsets, mode)
and turns key presses into state transitions. Anything that needs I/O is
returned to the caller as an effect instead of being performed here:

- ``RequestDiff``: render the diff of an entry (asynchronously)
- ``RunCommand``: run a custom command on the selected entry
- ``Quit``: terminate the session

Diff renders are tagged with a generation number. A result is applied only
if its generation is still current, so a slow render for a commit the user
already left never reaches the diff pane.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from enum import Enum

from oper.models.commit import HistoryEntry
from oper.tui.keys import Action, action_for

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Display mode of the history browser."""

    LIST = "list"
    DIFF = "diff"


@dataclass(slots=True)
class ViewState:
    """Mutable view state, written only by the state machine.

    Attributes:
        selected: Index of the selected entry, None while the history is empty.
        list_offset: Index of the first entry shown in the list.
        diff_offset: Index of the first diff line shown in the diff pane.
        mode: Current display mode.
    """

    selected: int | None = None
    list_offset: int = 0
    diff_offset: int = 0
    mode: Mode = Mode.LIST


@dataclass(frozen=True, slots=True)
class RequestDiff:
    """Effect: render the diff of ``entry`` and report back with ``generation``."""

    generation: int
    entry: HistoryEntry


@dataclass(frozen=True, slots=True)
class RunCommand:
    """Effect: run the custom command bound to ``key`` on ``entry``."""

    key: str
    entry: HistoryEntry


@dataclass(frozen=True, slots=True)
class Quit:
    """Effect: end the session."""


Effect = RequestDiff | RunCommand | Quit


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


@dataclass
class UIStateMachine:
    """List/Diff state machine over a merged history.

    Args:
        entries: Merged history entries, newest first.
        custom_keys: Keys bound to custom commands.
        viewport_height: Number of rows available to the list and diff panes.
    """

    entries: Sequence[HistoryEntry]
    custom_keys: Collection[str] = field(default_factory=frozenset)
    viewport_height: int = 20
    state: ViewState = field(init=False)
    generation: int = field(init=False, default=0)
    diff_lines: list[str] | None = field(init=False, default=None)
    diff_failed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.viewport_height = max(1, self.viewport_height)
        self.state = ViewState(selected=0 if self.entries else None)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        """Current display mode."""
        return self.state.mode

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to select."""
        return not self.entries

    @property
    def selected_entry(self) -> HistoryEntry | None:
        """The selected history entry, or None for an empty history."""
        if self.state.selected is None:
            return None
        return self.entries[self.state.selected]

    @property
    def is_loading(self) -> bool:
        """Check if the diff pane waits for a render result."""
        return self.state.mode is Mode.DIFF and self.diff_lines is None

    def visible_entries(self) -> list[tuple[int, HistoryEntry]]:
        """Entries inside the list viewport, with their indices."""
        start = self.state.list_offset
        stop = start + self.viewport_height
        return list(enumerate(self.entries[start:stop], start=start))

    def visible_diff_lines(self) -> list[str]:
        """Diff lines inside the diff viewport."""
        if self.diff_lines is None:
            return []
        start = self.state.diff_offset
        return self.diff_lines[start : start + self.viewport_height]

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> Effect | None:
        """Apply a key press.

        Args:
            key: Normalized key name (see oper.tui.keys).

        Returns:
            An effect the caller must carry out, or None.
        """
        action = action_for(key)
        if action is Action.QUIT:
            return Quit()
        if action is None:
            if key in self.custom_keys and self.selected_entry is not None:
                return RunCommand(key=key, entry=self.selected_entry)
            return None
        if self.state.mode is Mode.LIST:
            return self._handle_list_action(action)
        self._handle_diff_action(action)
        return None

    def _handle_list_action(self, action: Action) -> Effect | None:
        page = self.viewport_height
        if action is Action.SCROLL_DOWN:
            self.move_selection(1)
        elif action is Action.SCROLL_UP:
            self.move_selection(-1)
        elif action is Action.PAGE_DOWN:
            self.move_selection(page)
        elif action is Action.PAGE_UP:
            self.move_selection(-page)
        elif action is Action.FIRST:
            self.select(0)
        elif action is Action.LAST:
            self.select(len(self.entries) - 1)
        elif action is Action.OPEN_DIFF:
            return self.open_diff()
        return None

    def _handle_diff_action(self, action: Action) -> None:
        page = self.viewport_height
        if action is Action.SCROLL_DOWN:
            self.scroll_diff(1)
        elif action is Action.SCROLL_UP:
            self.scroll_diff(-1)
        elif action is Action.PAGE_DOWN:
            self.scroll_diff(page)
        elif action is Action.PAGE_UP:
            self.scroll_diff(-page)
        elif action is Action.FIRST:
            self.scroll_diff(-self.state.diff_offset)
        elif action is Action.LAST:
            self.scroll_diff(self._max_diff_offset())
        elif action is Action.BACK:
            self.back()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def move_selection(self, delta: int) -> None:
        """Move the selection by ``delta`` entries (clamped)."""
        if self.state.selected is None:
            return
        self.select(self.state.selected + delta)

    def select(self, index: int) -> None:
        """Select an entry by index (clamped) and keep it visible."""
        if self.is_empty:
            return
        self.state.selected = _clamp(index, 0, len(self.entries) - 1)
        self._follow_selection()

    def open_diff(self) -> RequestDiff | None:
        """Switch to the diff pane for the selected entry.

        Returns:
            The render request for the selected entry, or None if the
            history is empty.
        """
        entry = self.selected_entry
        if entry is None:
            return None
        self.generation += 1
        self.state.mode = Mode.DIFF
        self.state.diff_offset = 0
        self.diff_lines = None
        self.diff_failed = False
        logger.debug("Requesting diff of %s (generation %d)", entry.commit.id, self.generation)
        return RequestDiff(generation=self.generation, entry=entry)

    def back(self) -> None:
        """Return to the list; any pending render becomes stale."""
        self.generation += 1
        self.state.mode = Mode.LIST
        self.state.diff_offset = 0
        self.diff_lines = None
        self.diff_failed = False

    def scroll_diff(self, delta: int) -> None:
        """Scroll the diff pane by ``delta`` lines (clamped)."""
        self.state.diff_offset = _clamp(self.state.diff_offset + delta, 0, self._max_diff_offset())

    def resize(self, viewport_height: int) -> None:
        """Adopt a new viewport height and re-clamp all offsets."""
        self.viewport_height = max(1, viewport_height)
        self._follow_selection()
        self.scroll_diff(0)

    def complete_diff(self, generation: int, text: str) -> bool:
        """Apply a finished render if it is still wanted.

        Args:
            generation: Generation the render was requested with.
            text: Rendered diff text.

        Returns:
            True if applied, False if the result was stale and dropped.
        """
        if not self._is_current(generation):
            logger.debug("Dropping stale diff (generation %d, current %d)", generation, self.generation)
            return False
        self.diff_lines = text.splitlines()
        self.diff_failed = False
        self.scroll_diff(0)
        return True

    def fail_diff(self, generation: int, message: str) -> bool:
        """Show a render failure inline in the diff pane if still wanted."""
        if not self._is_current(generation):
            return False
        self.diff_lines = message.splitlines() or [message]
        self.diff_failed = True
        self.scroll_diff(0)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_current(self, generation: int) -> bool:
        return generation == self.generation and self.state.mode is Mode.DIFF

    def _max_diff_offset(self) -> int:
        if self.diff_lines is None:
            return 0
        return max(0, len(self.diff_lines) - self.viewport_height)

    def _follow_selection(self) -> None:
        selected = self.state.selected
        if selected is None:
            self.state.list_offset = 0
            return
        offset = self.state.list_offset
        if selected < offset:
            offset = selected
        elif selected >= offset + self.viewport_height:
            offset = selected - self.viewport_height + 1
        max_offset = max(0, len(self.entries) - self.viewport_height)
        self.state.list_offset = _clamp(offset, 0, max_offset)
