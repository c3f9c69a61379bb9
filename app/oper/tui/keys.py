"""Built-in key bindings of the history browser.

Keys are Textual key names: printable keys are their character, special
keys use names such as ``enter`` or ``pagedown``. Every key listed here is
reserved and cannot be bound to a custom command.
"""

from enum import Enum
from types import MappingProxyType


class Action(str, Enum):
    """Built-in actions of the history browser."""

    QUIT = "quit"
    SCROLL_DOWN = "scroll-down"
    SCROLL_UP = "scroll-up"
    OPEN_DIFF = "open-diff"
    BACK = "back"
    PAGE_DOWN = "page-down"
    PAGE_UP = "page-up"
    FIRST = "first"
    LAST = "last"


KEY_BINDINGS: MappingProxyType[str, Action] = MappingProxyType(
    {
        "q": Action.QUIT,
        "j": Action.SCROLL_DOWN,
        "down": Action.SCROLL_DOWN,
        "k": Action.SCROLL_UP,
        "up": Action.SCROLL_UP,
        "enter": Action.OPEN_DIFF,
        "escape": Action.BACK,
        "backspace": Action.BACK,
        "left": Action.BACK,
        "pagedown": Action.PAGE_DOWN,
        "pageup": Action.PAGE_UP,
        "home": Action.FIRST,
        "end": Action.LAST,
    }
)

RESERVED_KEYS: frozenset[str] = frozenset(KEY_BINDINGS)


def action_for(key: str) -> Action | None:
    """Look up the built-in action bound to a key.

    Args:
        key: Normalized key name.

    Returns:
        The bound Action, or None if the key is not reserved.
    """
    return KEY_BINDINGS.get(key)
