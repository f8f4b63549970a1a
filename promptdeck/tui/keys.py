"""Terminal-independent key events.

The router and dialogs work on ``Key`` values rather than prompt_toolkit
key presses, so the state machines can be driven directly in tests.
"""

from dataclasses import dataclass
from typing import Optional

from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
ENTER = "enter"
ESCAPE = "escape"
TAB = "tab"
BACKSPACE = "backspace"
CHAR = "char"
OTHER = "other"

_SPECIAL_KEYS = {
    Keys.Up: UP,
    Keys.Down: DOWN,
    Keys.Left: LEFT,
    Keys.Right: RIGHT,
    Keys.ControlM: ENTER,
    Keys.ControlJ: ENTER,
    Keys.Escape: ESCAPE,
    Keys.ControlI: TAB,
    Keys.ControlH: BACKSPACE,
    Keys.Backspace: BACKSPACE,
}


@dataclass(frozen=True)
class Key:
    """A single key press: a named special key, or a printable character."""

    name: str
    char: Optional[str] = None

    @classmethod
    def of(cls, char: str) -> "Key":
        """Key for a printable character."""
        return cls(CHAR, char)

    def is_char(self, *chars: str) -> bool:
        """True for a printable key, optionally one of ``chars``."""
        if self.name != CHAR:
            return False
        return not chars or self.char in chars

    @property
    def printable(self) -> bool:
        return self.name == CHAR and bool(self.char) and self.char.isprintable()

    def __str__(self) -> str:
        return self.char if self.name == CHAR and self.char else self.name


def key_from_press(press: KeyPress) -> Key:
    """Translate a prompt_toolkit ``KeyPress`` into a ``Key``."""
    name = _SPECIAL_KEYS.get(press.key)
    if name is not None:
        return Key(name)
    key = press.key
    if isinstance(key, str) and len(key) == 1 and key.isprintable():
        return Key(CHAR, key)
    return Key(OTHER)
