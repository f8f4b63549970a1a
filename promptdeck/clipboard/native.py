"""Clipboard access through the platform's command-line tools."""

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Seconds a clipboard command may run before it is abandoned
TOOL_TIMEOUT = 5


@dataclass(frozen=True)
class ClipboardTool:
    """A copy/paste command pair and the environment it serves."""

    environment: str  # darwin, win32, wayland or x11
    name: str
    copy_argv: Sequence[str]
    paste_argv: Sequence[str]


# Preference order within each environment
TOOLS: List[ClipboardTool] = [
    ClipboardTool("darwin", "pbcopy", ("pbcopy",), ("pbpaste",)),
    ClipboardTool("win32", "clip", ("clip",), ("powershell", "-NoProfile", "-Command", "Get-Clipboard")),
    ClipboardTool("wayland", "wl-copy", ("wl-copy",), ("wl-paste", "--no-newline")),
    ClipboardTool(
        "x11", "xclip",
        ("xclip", "-selection", "clipboard"),
        ("xclip", "-selection", "clipboard", "-o"),
    ),
    ClipboardTool("x11", "xsel", ("xsel", "--clipboard", "--input"), ("xsel", "--clipboard", "--output")),
]


def current_environments() -> List[str]:
    """Environments to search for a tool, most likely first."""
    if sys.platform in ("darwin", "win32"):
        return [sys.platform]
    if os.environ.get("XDG_SESSION_TYPE", "").lower() == "wayland" or os.environ.get("WAYLAND_DISPLAY"):
        return ["wayland", "x11"]
    return ["x11", "wayland"]


def detect_tool(which: Callable[[str], Optional[str]] = shutil.which) -> Optional[ClipboardTool]:
    """First installed tool for the current environment, or None."""
    for environment in current_environments():
        for tool in TOOLS:
            if tool.environment == environment and which(tool.name):
                return tool
    return None


class NativeProvider:
    """Copies by piping text into a clipboard command; pastes by reading one.

    Failures never raise. ``copy`` returns False and ``paste`` returns None,
    with the reason kept in ``last_error``.
    """

    def __init__(self, tool: Optional[ClipboardTool] = None):
        self.tool = tool or detect_tool()
        self.last_error: Optional[str] = None

    @property
    def name(self) -> str:
        return f"native ({self.tool.name if self.tool else 'unavailable'})"

    @property
    def available(self) -> bool:
        return self.tool is not None

    def _report_missing(self) -> None:
        environments = current_environments()
        looked_for = ", ".join(t.name for t in TOOLS if t.environment in environments)
        self.last_error = f"no clipboard tool found (looked for {looked_for})"

    def _run(self, argv: Sequence[str], data: Optional[bytes] = None) -> Optional[bytes]:
        # stdout stays unpiped on copy: xclip and xsel fork a server that inherits it
        try:
            result = subprocess.run(
                list(argv),
                input=data,
                stdout=subprocess.DEVNULL if data is not None else subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=TOOL_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            self.last_error = f"{argv[0]} timed out after {TOOL_TIMEOUT}s"
        except OSError as e:
            self.last_error = f"cannot run {argv[0]}: {e}"
        else:
            if result.returncode == 0:
                self.last_error = None
                return result.stdout or b""
            self.last_error = (
                result.stderr.decode("utf-8", errors="replace").strip()
                or f"{argv[0]} exited with code {result.returncode}"
            )
        logger.warning(f"Clipboard command {argv[0]} failed: {self.last_error}")
        return None

    def copy(self, text: str) -> bool:
        if self.tool is None:
            self._report_missing()
            return False
        return self._run(self.tool.copy_argv, text.encode("utf-8")) is not None

    def paste(self) -> Optional[str]:
        if self.tool is None:
            self._report_missing()
            return None
        output = self._run(self.tool.paste_argv)
        if output is None:
            return None
        return output.decode("utf-8", errors="replace")
