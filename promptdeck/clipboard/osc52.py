"""Clipboard writes through the terminal's OSC 52 escape sequence."""

import base64
import sys
from typing import Optional, TextIO

# Largest base64 payload sent; several terminals drop longer sequences
MAX_PAYLOAD = 74994


def osc52_sequence(text: str) -> str:
    """``ESC ] 52 ; c ; <base64> BEL`` for ``text``, cut to fit ``MAX_PAYLOAD``."""
    data = text.encode("utf-8")
    limit = MAX_PAYLOAD // 4 * 3
    if len(data) > limit:
        data = data[:limit].decode("utf-8", errors="ignore").encode("utf-8")
    return "\x1b]52;c;" + base64.b64encode(data).decode("ascii") + "\x07"


class OSC52Provider:
    """Asks the terminal emulator to set the system clipboard.

    Works over SSH with no local tool installed. The terminal never replies,
    so a successful copy only means the sequence was written, and the
    clipboard cannot be read back.
    """

    name = "OSC 52"

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self.last_error: Optional[str] = None

    def copy(self, text: str) -> bool:
        if not text:
            self.last_error = "nothing to copy"
            return False
        stream = self._stream or sys.stdout
        stream.write(osc52_sequence(text))
        stream.flush()
        self.last_error = None
        return True

    def paste(self) -> Optional[str]:
        self.last_error = "OSC 52 cannot read the clipboard; install a clipboard tool or set clipboard to native"
        return None
