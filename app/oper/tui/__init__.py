"""Interactive history browser.

This module exports the navigation state machine and its key table. The
Textual application lives in oper.tui.app.
"""

from oper.tui.keys import KEY_BINDINGS, RESERVED_KEYS, Action
from oper.tui.state import Mode, Quit, RequestDiff, RunCommand, UIStateMachine, ViewState

__all__ = [
    "KEY_BINDINGS",
    "RESERVED_KEYS",
    "Action",
    "Mode",
    "Quit",
    "RequestDiff",
    "RunCommand",
    "UIStateMachine",
    "ViewState",
]
