"""Full-screen run loop for the interactive surface.

prompt_toolkit owns the terminal. Every key press reaches ``InputRouter``
through a single wildcard binding; the screen is redrawn from ``AppState``
after each one. Editing happens in a ``run_in_terminal`` handoff, which
leaves the alternate screen, runs the editor, then re-enters and repaints
everything.

Unrecoverable errors are passed to ``Application.exit(exception=...)`` so
the terminal is restored before ``run()`` re-raises them.
"""

import logging
from typing import Optional

from prompt_toolkit.application import Application, run_in_terminal
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import Window
from prompt_toolkit.layout.controls import FormattedTextControl

from ..application import PromptApplication
from ..clipboard import ClipboardProvider
from ..editor import EditorLauncher
from ..errors import PromptDeckError
from .keys import key_from_press
from .router import InputRouter
from .screens import PromptScreen
from .state import AppMode, AppState, PendingAction

logger = logging.getLogger(__name__)

# Seconds to wait before treating a lone Escape as the Escape key
ESCAPE_TIMEOUT = 0.05


class PromptDeckTUI:
    """Wires application state, router and screen to a prompt_toolkit app."""

    def __init__(
        self,
        application: PromptApplication,
        clipboard: ClipboardProvider,
        editor: EditorLauncher,
        mode: AppMode = AppMode.QUICK_SELECT,
    ):
        self.state = AppState(application, mode)
        self.router = InputRouter(self.state, clipboard)
        self.screen = PromptScreen(self.state, self.router)
        self.editor = editor
        self._app: Optional[Application] = None

    def _get_screen_text(self):
        if self._app is not None:
            size = self._app.output.get_size()
            self.screen.resize(size.columns, size.rows)
        return ANSI(self.screen.render())

    def _build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-c", eager=True)
        def _quit(event: KeyPressEvent) -> None:
            """Ctrl+C always quits, whatever has focus."""
            event.app.exit()

        @kb.add(Keys.Any)
        def _route(event: KeyPressEvent) -> None:
            self.handle_key_press(event.app, event.key_sequence[0])

        return kb

    def build_app(self) -> Application:
        control = FormattedTextControl(self._get_screen_text, focusable=True, show_cursor=False)
        app = Application(
            layout=Layout(Window(content=control, wrap_lines=False)),
            key_bindings=self._build_key_bindings(),
            full_screen=True,
            mouse_support=False,
        )
        app.ttimeoutlen = ESCAPE_TIMEOUT
        app.timeoutlen = ESCAPE_TIMEOUT
        self._app = app
        return app

    def handle_key_press(self, app: Application, press) -> None:
        """Route one key press, then run deferred work or quit."""
        try:
            self.router.dispatch(key_from_press(press))
        except PromptDeckError as e:
            logger.error(f"Unrecoverable error: {e}")
            app.exit(exception=e)
            return

        if self.state.take_pending_action() is PendingAction.EDIT_SELECTED:
            run_in_terminal(lambda: self._run_editor(app), in_executor=False)
            return

        if self.state.should_quit:
            app.exit()

    def _run_editor(self, app: Application) -> None:
        # Runs with the terminal handed back; the app repaints on return
        try:
            self.state.edit_selected(self.editor)
        except Exception as e:
            logger.exception("Editor handoff failed")
            app.exit(exception=e)

    def run(self) -> None:
        """Run until the user quits.

        Raises:
            PromptDeckError: For unrecoverable errors, after the terminal
                has been restored.
        """
        app = self.build_app()
        app.run()


def run_tui(
    application: PromptApplication,
    clipboard: ClipboardProvider,
    editor: EditorLauncher,
    mode: AppMode = AppMode.QUICK_SELECT,
) -> None:
    PromptDeckTUI(application, clipboard, editor, mode).run()
