"""Clipboard access for promptdeck.

Two providers share one small interface. ``NativeProvider`` drives the
platform's clipboard commands and can read the clipboard back;
``OSC52Provider`` writes through the terminal and cannot.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .native import NativeProvider, detect_tool
from .osc52 import OSC52Provider


class ClipboardMechanism(Enum):
    AUTO = "auto"  # native when a tool is installed, else OSC 52
    NATIVE = "native"
    OSC52 = "osc52"


@dataclass
class ClipboardConfig:
    mechanism: ClipboardMechanism = ClipboardMechanism.AUTO


class ClipboardProvider(Protocol):
    """What the application needs from a clipboard."""

    name: str
    last_error: Optional[str]

    def copy(self, text: str) -> bool:
        """Return False on failure, with the reason in ``last_error``."""
        ...

    def paste(self) -> Optional[str]:
        """Clipboard text, or None with the reason in ``last_error``."""
        ...


def create_provider(config: ClipboardConfig) -> ClipboardProvider:
    if config.mechanism is ClipboardMechanism.OSC52:
        return OSC52Provider()
    native = NativeProvider()
    if config.mechanism is ClipboardMechanism.NATIVE or native.available:
        return native
    return OSC52Provider()


__all__ = [
    "ClipboardConfig",
    "ClipboardMechanism",
    "ClipboardProvider",
    "NativeProvider",
    "OSC52Provider",
    "create_provider",
    "detect_tool",
]
