"""Input routing for the interactive surface.

Key presses go to exactly one handler: the first entry of ``HANDLERS``
whose ``is_active`` returns True. The order of that list is the precedence
table, highest first:

    error banner > confirmation > tag filter > tag edit > create
    > search input > top level

Each handler also knows how to draw its own overlay, so the screen can ask
every active handler for a panel without knowing the dialog kinds.
"""

import logging
from typing import List, Optional

from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..clipboard import ClipboardProvider
from ..errors import PromptDeckError
from . import keys
from .dialogs import (
    ConfirmationDialog,
    CreateDialog,
    DialogAction,
    DialogField,
    TagEditDialog,
    TagFilterDialog,
    TagInputMode,
)
from .keys import Key
from .state import AppMode, AppState, PendingAction

logger = logging.getLogger(__name__)


class KeyHandler:
    """One entry of the precedence table."""

    name = "base"

    def is_active(self, state: AppState) -> bool:
        raise NotImplementedError

    def handle_key(self, state: AppState, key: Key, clipboard: ClipboardProvider) -> None:
        raise NotImplementedError

    def render(self, state: AppState) -> Optional[RenderableType]:
        """Overlay panel for this handler, or None."""
        return None

    def hints(self, state: AppState) -> str:
        """Key hints for the footer while this handler has focus."""
        return ""


class ErrorBannerHandler(KeyHandler):
    """Swallows the next key after an error so the user acknowledges it."""

    name = "error"

    def is_active(self, state):
        return state.has_error

    def handle_key(self, state, key, clipboard):
        state.clear_error()

    def render(self, state):
        if not state.has_error:
            return None
        return Panel(
            Text(state.error, style="bold white"),
            title="Error",
            border_style="red",
            style="on dark_red",
        )

    def hints(self, state):
        return "any key: dismiss"


class ConfirmationHandler(KeyHandler):
    name = "confirmation"

    def is_active(self, state):
        return isinstance(state.dialog, ConfirmationDialog)

    def handle_key(self, state, key, clipboard):
        result = state.dialog.handle_key(key)
        if result is None:
            return
        if result.action is DialogAction.CONFIRM:
            state.confirm_action()
        else:
            state.cancel_confirmation()

    def render(self, state):
        dialog = state.dialog
        return Panel(
            Text.assemble((dialog.message, "bold"), "\n\n", ("y", "bold green"), " yes   ",
                          ("n", "bold red"), "/", ("Esc", "bold red"), " no"),
            title="Confirm",
            border_style="yellow",
        )

    def hints(self, state):
        return "y: confirm  n/Esc: cancel"


class TagFilterHandler(KeyHandler):
    name = "tag_filter"

    def is_active(self, state):
        return isinstance(state.dialog, TagFilterDialog)

    def handle_key(self, state, key, clipboard):
        result = state.dialog.handle_key(key)
        if result is None:
            return
        state.close_tag_filter()
        if result.action is DialogAction.SELECT:
            state.set_tag_filter(result.value)
        elif result.action is DialogAction.CLEAR:
            state.clear_tag_filter()

    def render(self, state):
        dialog = state.dialog
        body = Text()
        if not dialog.tags:
            body.append("No tags in use", style="dim")
        for i, tag in enumerate(dialog.tags):
            marker = "> " if i == dialog.cursor else "  "
            style = "reverse" if i == dialog.cursor else ""
            if tag == state.index.tag_filter:
                tag = f"{tag} (active)"
            body.append(f"{marker}{tag}\n", style=style)
        return Panel(body, title="Filter by tag", border_style="cyan")

    def hints(self, state):
        return "↑/↓: move  Enter: apply  c: clear filter  Esc: close"


class TagEditHandler(KeyHandler):
    name = "tag_edit"

    def is_active(self, state):
        return isinstance(state.dialog, TagEditDialog)

    def handle_key(self, state, key, clipboard):
        dialog = state.dialog
        result = dialog.handle_key(key, state.selected_tags())
        if result is None:
            return
        if result.action is DialogAction.CANCEL:
            state.close_tag_management()
        elif result.action is DialogAction.ADD_TAG:
            state.add_tag_to_selected(result.value)
        elif result.action is DialogAction.REMOVE_TAG:
            state.remove_tag_from_selected(result.value)

    def render(self, state):
        dialog = state.dialog
        tags = state.selected_tags()
        body = Text()
        body.append(f"Tags for {dialog.prompt_name}\n\n", style="bold")
        if not tags:
            body.append("(no tags)\n", style="dim")
        for i, tag in enumerate(tags):
            removing = dialog.mode is TagInputMode.REMOVING_TAG and i == dialog.cursor
            body.append(f"{'> ' if removing else '  '}{tag}\n", style="reverse" if removing else "")
        if dialog.mode is TagInputMode.ADDING_TAG:
            body.append("\nNew tag: ", style="bold")
            body.append(dialog.buffer)
            body.append("█", style="blink")
        return Panel(body, title="Manage tags", border_style="magenta")

    def hints(self, state):
        mode = state.dialog.mode
        if mode is TagInputMode.ADDING_TAG:
            return "type tag  Enter: add  Esc: cancel"
        if mode is TagInputMode.REMOVING_TAG:
            return "↑/↓: choose  Enter: remove  Esc: cancel"
        return "a: add tag  r: remove tag  Esc: close"


class CreateHandler(KeyHandler):
    name = "create"

    def is_active(self, state):
        return isinstance(state.dialog, CreateDialog)

    def handle_key(self, state, key, clipboard):
        result = state.dialog.handle_key(key)
        if result is None:
            return
        if result.action is DialogAction.CANCEL:
            state.close_create_dialog()
        elif result.action is DialogAction.CONFIRM:
            try:
                state.confirm_create()
            except PromptDeckError as e:
                if not e.recoverable:
                    raise
                state.set_error(f"Failed to create prompt: {e}")

    def render(self, state):
        dialog = state.dialog
        table = Table.grid(padding=(0, 1))
        table.add_column(style="bold", justify="right")
        table.add_column()

        on_filename = dialog.current_field is DialogField.FILENAME
        filename = Text(dialog.filename, style="underline" if on_filename else "")
        if on_filename:
            filename.append("█", style="blink")
        table.add_row("Name:", filename)

        choices = Text()
        for i, name in enumerate(dialog.templates):
            chosen = i == dialog.template_index
            style = "reverse" if chosen and not on_filename else ("bold" if chosen else "dim")
            choices.append(f" {name} ", style=style)
        table.add_row("Template:", choices)

        file_hint = f"{dialog.normalized_name}.md" if dialog.is_valid() else "(enter a name)"
        table.add_row("File:", Text(file_hint, style="dim"))
        return Panel(table, title="New prompt", border_style="green")

    def hints(self, state):
        if state.dialog.current_field is DialogField.TEMPLATE:
            return "←/→ h/l: template  Tab: next field  Enter: create  Esc: cancel"
        return "type name  Tab: next field  Enter: create  Esc: cancel"


class SearchHandler(KeyHandler):
    name = "search"

    def is_active(self, state):
        return state.search_active

    def handle_key(self, state, key, clipboard):
        if key.name == keys.ESCAPE:
            state.deactivate_search()
        elif key.name == keys.BACKSPACE:
            query = state.search_query
            if query:
                state.set_search_query(query[:-1])
        elif key.name == keys.ENTER:
            if state.mode is AppMode.QUICK_SELECT:
                state.copy_selected_and_quit(clipboard)
        elif key.name == keys.UP:
            state.previous()
        elif key.name == keys.DOWN:
            state.next()
        elif key.printable:
            state.set_search_query(state.search_query + key.char)

    def hints(self, state):
        if state.mode is AppMode.QUICK_SELECT:
            return "type to search  ↑/↓: move  Enter: copy  Esc: clear search"
        return "type to search  ↑/↓: move  Esc: clear search"


class TopLevelHandler(KeyHandler):
    name = "top_level"

    def is_active(self, state):
        return True

    def handle_key(self, state, key, clipboard):
        if key.name == keys.ESCAPE or key.is_char("q"):
            state.quit()
        elif key.name == keys.DOWN or key.is_char("j"):
            state.next()
        elif key.name == keys.UP or key.is_char("k"):
            state.previous()
        elif key.is_char("/"):
            state.activate_search()
        elif key.is_char("f"):
            state.open_tag_filter()
        elif key.is_char("m"):
            state.toggle_mode()
        elif key.name == keys.ENTER:
            if state.mode is AppMode.QUICK_SELECT:
                state.copy_selected_and_quit(clipboard)
        elif state.is_management:
            self._handle_management(state, key)

    def _handle_management(self, state: AppState, key: Key) -> None:
        if key.is_char("e"):
            if state.selected is not None:
                state.set_pending_action(PendingAction.EDIT_SELECTED)
        elif key.is_char("d"):
            state.show_delete_confirmation()
        elif key.is_char("n"):
            state.create_new_prompt()
        elif key.is_char("t"):
            state.open_tag_management()

    def hints(self, state):
        common = "j/k: move  /: search  f: filter  m: mode  q: quit"
        if state.mode is AppMode.QUICK_SELECT:
            return f"Enter: copy & quit  {common}"
        return f"e: edit  n: new  d: delete  t: tags  {common}"


# Precedence order, highest first
HANDLERS: List[KeyHandler] = [
    ErrorBannerHandler(),
    ConfirmationHandler(),
    TagFilterHandler(),
    TagEditHandler(),
    CreateHandler(),
    SearchHandler(),
    TopLevelHandler(),
]


class InputRouter:
    """Dispatches keys to the first active handler.

    Recoverable errors raised by an operation are turned into the error
    banner; anything else propagates to the run loop, which tears the
    terminal down.
    """

    def __init__(
        self,
        state: AppState,
        clipboard: ClipboardProvider,
        handlers: Optional[List[KeyHandler]] = None,
    ):
        self.state = state
        self.clipboard = clipboard
        self.handlers = handlers if handlers is not None else HANDLERS

    def active_handler(self) -> KeyHandler:
        for handler in self.handlers:
            if handler.is_active(self.state):
                return handler
        raise RuntimeError("No active key handler")

    def active_handlers(self) -> List[KeyHandler]:
        return [h for h in self.handlers if h.is_active(self.state)]

    def dispatch(self, key: Key) -> None:
        handler = self.active_handler()
        self.state.status = None
        logger.debug(f"{handler.name} <- {key}")
        try:
            handler.handle_key(self.state, key, self.clipboard)
        except PromptDeckError as e:
            if not e.recoverable:
                raise
            self.state.set_error(str(e))
