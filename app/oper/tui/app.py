"""Textual application hosting the history browser.

The app is a thin shell around UIStateMachine: it feeds key presses and
resizes into the machine, carries out the returned effects and redraws
the panes from the machine's state. Diff renders run in thread workers and
report back through ``call_from_thread``.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Static

from oper.core.diff import DiffRenderer, RenderError
from oper.core.dispatch import CommandDispatcher, DispatchError
from oper.core.theme import ThemeColors, get_colors
from oper.tui.render import commit_bar_text, render_diff, render_list, status_bar_text
from oper.tui.state import Mode, Quit, RequestDiff, RunCommand, UIStateMachine

if TYPE_CHECKING:
    from oper.models.history import History
    from oper.tui.state import Effect

logger = logging.getLogger(__name__)

# Rows used by the commit bar and the status bar
CHROME_HEIGHT = 2


def normalize_key(event: events.Key) -> str:
    """Map a Textual key event to the key names used by the state machine."""
    if event.is_printable and event.character:
        return event.character
    return event.key


class HistoryApp(App[None]):
    """Browse a merged multi-repository history."""

    TITLE = "oper"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #body {
        height: 1fr;
        width: 100%;
    }
    #commit-bar, #status-bar {
        height: 1;
        width: 100%;
    }
    """

    def __init__(
        self,
        history: History,
        renderer: DiffRenderer,
        dispatcher: CommandDispatcher | None = None,
        *,
        days: int | None = None,
        colors: ThemeColors | None = None,
    ) -> None:
        super().__init__()
        self.history = history
        self.renderer = renderer
        self.dispatcher = dispatcher or CommandDispatcher()
        self.days = days
        self.theme_colors = colors or get_colors()
        self.machine = UIStateMachine(history.entries, custom_keys=self.dispatcher.keys)
        self._view_ready = False

    def compose(self) -> ComposeResult:
        yield Static(id="body")
        yield Static(id="commit-bar")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        for bar in self.query("#commit-bar, #status-bar"):
            bar.styles.background = self.theme_colors.bar_background
            bar.styles.color = self.theme_colors.bar_text
        self._view_ready = True
        self.machine.resize(self.size.height - CHROME_HEIGHT)
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.machine.resize(event.size.height - CHROME_HEIGHT)
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        effect = self.machine.handle_key(normalize_key(event))
        if effect is not None:
            event.stop()
            self.apply_effect(effect)
        self.refresh_view()

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def apply_effect(self, effect: Effect) -> None:
        """Carry out an effect returned by the state machine."""
        if isinstance(effect, Quit):
            self.exit()
        elif isinstance(effect, RequestDiff):
            self._request_diff(effect)
        elif isinstance(effect, RunCommand):
            self._run_command(effect)

    def _request_diff(self, request: RequestDiff) -> None:
        if self.renderer.is_cached(request.entry):
            self._render_now(request)
            return
        self.run_worker(
            partial(self._render_in_thread, request),
            name=f"diff-{request.entry.commit.short_id}",
            group="diff",
            thread=True,
            exit_on_error=False,
        )

    def _render_now(self, request: RequestDiff) -> None:
        try:
            text = self.renderer.render(request.entry)
        except RenderError as e:
            self.machine.fail_diff(request.generation, str(e))
        else:
            self.machine.complete_diff(request.generation, text)

    def _render_in_thread(self, request: RequestDiff) -> None:
        try:
            text = self.renderer.render(request.entry)
        except RenderError as e:
            logger.debug("Render failed: %s", e)
            self.call_from_thread(self._on_diff_failed, request.generation, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error rendering %s", request.entry.commit.short_id)
            message = f"Failed to render diff: {e}"
            self.call_from_thread(self._on_diff_failed, request.generation, message)
            return
        self.call_from_thread(self._on_diff_ready, request.generation, text)

    def _on_diff_ready(self, generation: int, text: str) -> None:
        if self.machine.complete_diff(generation, text):
            self.refresh_view()

    def _on_diff_failed(self, generation: int, message: str) -> None:
        if self.machine.fail_diff(generation, message):
            self.refresh_view()

    def _run_command(self, effect: RunCommand) -> None:
        command = self.dispatcher.commands.get(effect.key)
        try:
            self.dispatcher.dispatch(effect.key, effect.entry)
        except DispatchError as e:
            logger.warning("%s", e)
            self.notify(str(e), title="Custom command", severity="error", timeout=5)
            return
        if command is not None:
            self.notify(
                f"Started {command.executable} for {effect.entry.commit.short_id}",
                timeout=3,
            )

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def refresh_view(self) -> None:
        """Redraw all panes from the state machine."""
        if not self._view_ready:
            return
        body = self.query_one("#body", Static)
        if self.machine.mode is Mode.DIFF:
            body.update(render_diff(self.machine, self.theme_colors))
        else:
            body.update(render_list(self.machine, self.theme_colors, self._empty_message()))
        # Plain Text so bracketed key hints are not parsed as markup
        self.query_one("#commit-bar", Static).update(Text(commit_bar_text(self.machine)))
        self.query_one("#status-bar", Static).update(
            Text(status_bar_text(self.machine, self.history, self.size.width, self.size.height))
        )

    def _empty_message(self) -> str:
        if self.days is None:
            return "No commits found"
        return f"No commits found in the last {self.days} days"


def run_tui(
    history: History,
    renderer: DiffRenderer,
    dispatcher: CommandDispatcher | None = None,
    *,
    days: int | None = None,
) -> None:
    """Run the history browser until the user quits."""
    HistoryApp(history, renderer, dispatcher, days=days).run()
