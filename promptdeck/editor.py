"""Launching the user's external editor on a prompt file.

The editor is a blocking child process: it inherits the terminal, and the
caller waits for it to exit. Inside the full-screen UI this must only be
called while the terminal has been handed back (see ``tui.runner``).
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from .errors import EditorError

logger = logging.getLogger(__name__)


def get_editor(configured: Optional[str] = None) -> str:
    """Get the user's preferred editor.

    Checks the configured value, then $EDITOR, then $VISUAL, then falls
    back to 'vi'.
    """
    return configured or os.environ.get("EDITOR") or os.environ.get("VISUAL") or "vi"


class EditorLauncher:
    """Runs an editor command with a file path as its only positional argument."""

    def __init__(self, editor: Optional[str] = None):
        self._editor = editor

    @property
    def command(self) -> str:
        return get_editor(self._editor)

    def build_argv(self, path: Path) -> List[str]:
        """Split the editor command (``code --wait`` style) and append the path."""
        try:
            argv = shlex.split(self.command, posix=os.name != "nt")
        except ValueError as e:
            raise EditorError(f"cannot parse editor command {self.command!r}: {e}") from e
        if not argv:
            raise EditorError("editor command is empty")
        return argv + [str(path)]

    def launch(self, path: Path) -> None:
        """Open ``path`` in the editor and block until it exits.

        Raises:
            EditorError: If the editor cannot be started or exits non-zero.
        """
        argv = self.build_argv(Path(path).resolve())
        logger.debug(f"Launching editor: {argv}")
        try:
            result = subprocess.run(argv, check=False)
        except OSError as e:
            raise EditorError(f"cannot start {argv[0]!r}: {e}") from e
        if result.returncode != 0:
            raise EditorError(f"Editor exited with code {result.returncode}")
