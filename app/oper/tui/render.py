"""Rich renderables for the history browser panes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.style import Style
from rich.text import Text

from oper.tui.state import Mode, UIStateMachine
from oper.utils.formatting import pluralize

if TYPE_CHECKING:
    from oper.core.theme import ThemeColors
    from oper.models.commit import HistoryEntry
    from oper.models.history import History

COLUMN_WIDTH_DATE = 22
COLUMN_WIDTH_REPO = 15
COLUMN_WIDTH_AUTHOR = 17

HEADER_SEPARATOR = "---"


def _cell(value: str, width: int) -> str:
    """Pad or cut a value to exactly ``width`` characters plus a gap."""
    if len(value) > width:
        value = value[: max(0, width - 1)] + "…"
    return f"{value:<{width}} "


def format_row(entry: HistoryEntry) -> tuple[str, str, str, str]:
    """Split an entry into its list columns (date, repo, author, summary)."""
    commit = entry.commit
    return (
        _cell(commit.time_as_str, COLUMN_WIDTH_DATE),
        _cell(entry.repository.name, COLUMN_WIDTH_REPO),
        _cell(commit.author, COLUMN_WIDTH_AUTHOR),
        commit.summary,
    )


def render_list(machine: UIStateMachine, colors: ThemeColors, empty_message: str) -> Text:
    """Render the visible part of the history list.

    Args:
        machine: State machine providing entries and offsets.
        colors: Theme colors.
        empty_message: Text shown when the history is empty.

    Returns:
        One line per visible entry, the selected one highlighted.
    """
    if machine.is_empty:
        return Text(empty_message, style=colors.muted, justify="center")

    text = Text(no_wrap=True, overflow="ellipsis")
    selected = machine.state.selected
    for index, entry in machine.visible_entries():
        date, repo, author, summary = format_row(entry)
        line = Text.assemble(
            (date, colors.date),
            (repo, colors.repo),
            (author, colors.author),
            (summary, colors.text),
        )
        if index == selected:
            line.stylize(Style(bgcolor=colors.selection, bold=True))
        if text:
            text.append("\n")
        text.append_text(line)
    return text


def diff_line_style(line: str, colors: ThemeColors) -> str:
    """Pick the color of a patch line by its leading characters."""
    if line.startswith(("diff --git", "+++", "---", "index ", "new file", "deleted file")):
        return colors.file
    if line.startswith("@@"):
        return colors.hunk
    if line.startswith("+"):
        return colors.added
    if line.startswith("-"):
        return colors.removed
    return colors.context


def render_diff(machine: UIStateMachine, colors: ThemeColors) -> Text:
    """Render the visible part of the diff pane.

    Lines up to the first ``---`` separator form the commit header and
    message; everything after it is styled as a patch.
    """
    if machine.diff_lines is None:
        return Text("Loading diff…", style=colors.muted)
    if machine.diff_failed:
        return Text("\n".join(machine.diff_lines), style=f"bold {colors.error}")

    try:
        separator = machine.diff_lines.index(HEADER_SEPARATOR)
    except ValueError:
        separator = -1

    text = Text(no_wrap=True, overflow="ellipsis")
    start = machine.state.diff_offset
    for index, line in enumerate(machine.visible_diff_lines(), start=start):
        if index < separator:
            style = colors.commit_header if ":" in line[:12] else colors.text
        elif index == separator:
            style = colors.muted
        else:
            style = diff_line_style(line, colors)
        if index > start:
            text.append("\n")
        text.append(line, style=style)
    return text


def commit_bar_text(machine: UIStateMachine) -> str:
    """Text of the bar describing the selected commit."""
    entry = machine.selected_entry
    if entry is None:
        return "No commit selected"
    index = (machine.state.selected or 0) + 1
    return f"Commit {index} of {len(machine.entries)} - {entry.repository.rel_path}"


def status_bar_text(machine: UIStateMachine, history: History, width: int, height: int) -> str:
    """Text of the bottom status bar, right-aligned screen size included."""
    if machine.mode is Mode.DIFF and machine.diff_lines is not None:
        total = len(machine.diff_lines)
        first = min(total, machine.state.diff_offset + 1)
        last = min(total, machine.state.diff_offset + machine.viewport_height)
        left = f"Lines {first}-{last} of {total}  [esc] back  [j/k] scroll  [q] quit"
    else:
        left = (
            f"Found {pluralize(history.commit_count, 'commit')} across "
            f"{pluralize(history.repository_count, 'repository', 'repositories')}"
        )
        if history.failures:
            left += f" ({len(history.failures)} unreadable)"
    right = f" [{width}x{height}]"
    gap = width - len(left) - len(right)
    if gap > 0:
        return left + " " * gap + right
    return left
