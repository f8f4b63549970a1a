"""Application state for the interactive surface.

``AppState`` is the top-level state machine: the current mode, at most one
open dialog, the search flag and query, the pending deferred action, the
error banner, and the prompt index the list is drawn from. The input router
calls its operations; renderers only read it.
"""

import logging
from enum import Enum
from typing import List, Optional

from ..application import PromptApplication
from ..clipboard import ClipboardProvider
from ..editor import EditorLauncher
from ..errors import EditorError, MissingRequiredError, PromptDeckError, PromptNotFoundError
from ..index import PromptIndex
from ..models import PromptMetadata
from .dialogs import (
    AnyDialog,
    ConfirmAction,
    ConfirmationDialog,
    CreateDialog,
    TagEditDialog,
    TagFilterDialog,
)

logger = logging.getLogger(__name__)


class AppMode(Enum):
    QUICK_SELECT = "quick_select"
    MANAGEMENT = "management"

    @property
    def label(self) -> str:
        return "Quick Select" if self is AppMode.QUICK_SELECT else "Management"


class PendingAction(Enum):
    """Work that needs the terminal handed back before it can run."""
    EDIT_SELECTED = "edit_selected"


class AppState:
    """State and operations of the interactive prompt browser."""

    def __init__(self, application: PromptApplication, mode: AppMode = AppMode.QUICK_SELECT):
        self.application = application
        self.mode = mode
        self.index = PromptIndex(application.list_prompts())
        self.dialog: Optional[AnyDialog] = None
        self.search_active = False
        self.pending_action: Optional[PendingAction] = None
        self.error: Optional[str] = None
        self.status: Optional[str] = None
        self.should_quit = False

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def selected(self) -> Optional[PromptMetadata]:
        return self.index.selected

    @property
    def search_query(self) -> str:
        return self.index.query

    @property
    def is_management(self) -> bool:
        return self.mode is AppMode.MANAGEMENT

    def selected_tags(self) -> List[str]:
        """Current tags of the prompt the tag-edit dialog is working on."""
        if isinstance(self.dialog, TagEditDialog):
            prompt = self.index.get(self.dialog.prompt_name)
            return list(prompt.tags) if prompt else []
        prompt = self.selected
        return list(prompt.tags) if prompt else []

    def _require_selected(self) -> PromptMetadata:
        prompt = self.selected
        if prompt is None:
            raise PromptNotFoundError("(no prompt selected)")
        return prompt

    # ------------------------------------------------------------------
    # Mode, navigation, lifecycle
    # ------------------------------------------------------------------

    def toggle_mode(self) -> None:
        if self.mode is AppMode.QUICK_SELECT:
            self.mode = AppMode.MANAGEMENT
        else:
            self.mode = AppMode.QUICK_SELECT
        self.index.refresh()

    def next(self) -> None:
        self.index.select_next()

    def previous(self) -> None:
        self.index.select_previous()

    def quit(self) -> None:
        self.should_quit = True

    def reload(self) -> None:
        """Rescan the store; criteria and selection survive via the index."""
        self.index.reload(self.application.list_prompts())

    def set_error(self, message: str) -> None:
        logger.debug(f"Error banner: {message}")
        self.error = message

    def clear_error(self) -> None:
        self.error = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def set_pending_action(self, action: Optional[PendingAction]) -> None:
        self.pending_action = action

    def take_pending_action(self) -> Optional[PendingAction]:
        action, self.pending_action = self.pending_action, None
        return action

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def activate_search(self) -> None:
        self.search_active = True

    def deactivate_search(self) -> None:
        self.search_active = False
        self.index.set_query("")

    def set_search_query(self, query: str) -> None:
        self.index.set_query(query)

    # ------------------------------------------------------------------
    # Dialog lifecycle
    # ------------------------------------------------------------------

    def _open_dialog(self, dialog: AnyDialog) -> None:
        if self.dialog is not None:
            raise RuntimeError(
                f"Cannot open {type(dialog).__name__}: "
                f"{type(self.dialog).__name__} is already open"
            )
        self.dialog = dialog

    def _close_dialog(self, kind: type) -> None:
        if isinstance(self.dialog, kind):
            self.dialog = None

    # Confirmation

    def show_delete_confirmation(self) -> None:
        prompt = self.selected
        if prompt is None:
            return
        self._open_dialog(ConfirmationDialog(ConfirmAction.DELETE, prompt.name))

    def confirm_action(self) -> None:
        dialog = self.dialog
        if not isinstance(dialog, ConfirmationDialog):
            return
        self.dialog = None
        if dialog.action is ConfirmAction.DELETE:
            self._delete(dialog.target)

    def cancel_confirmation(self) -> None:
        self._close_dialog(ConfirmationDialog)

    # Tag filter

    def open_tag_filter(self) -> None:
        self._open_dialog(TagFilterDialog.for_tags(self.index.all_tags(), self.index.tag_filter))

    def close_tag_filter(self) -> None:
        self._close_dialog(TagFilterDialog)

    def set_tag_filter(self, tag: str) -> None:
        self.index.set_tag_filter(tag)

    def clear_tag_filter(self) -> None:
        self.index.set_tag_filter(None)

    # Tag edit

    def open_tag_management(self) -> None:
        prompt = self.selected
        if prompt is None:
            return
        self._open_dialog(TagEditDialog(prompt.name))

    def close_tag_management(self) -> None:
        self._close_dialog(TagEditDialog)

    def _tag_target(self) -> str:
        if isinstance(self.dialog, TagEditDialog):
            return self.dialog.prompt_name
        return self._require_selected().name

    def add_tag_to_selected(self, tag: str) -> None:
        self.application.add_tag(self._tag_target(), tag)
        self.reload()

    def remove_tag_from_selected(self, tag: str) -> None:
        self.application.remove_tag(self._tag_target(), tag)
        self.reload()

    # Create

    def create_new_prompt(self) -> None:
        """Open the create dialog."""
        self._open_dialog(CreateDialog())

    def close_create_dialog(self) -> None:
        self._close_dialog(CreateDialog)

    def confirm_create(self) -> PromptMetadata:
        """Create the prompt described by the open create dialog.

        On failure the dialog stays open so the name can be corrected.

        Raises:
            MissingRequiredError: If the filename is empty.
            PromptAlreadyExistsError: If the prompt exists.
        """
        dialog = self.dialog
        if not isinstance(dialog, CreateDialog):
            raise MissingRequiredError("filename")
        if not dialog.is_valid():
            raise MissingRequiredError("filename")
        template = dialog.selected_template
        created = self.create(dialog.filename, None if template == "none" else template)
        self.dialog = None
        return created

    def create(self, name: str, template: Optional[str] = None) -> PromptMetadata:
        created = self.application.create_prompt(name, template)
        self.reload()
        self.index.select_name(created.name)
        self.status = f"Created {created.file_path}"
        return created

    # ------------------------------------------------------------------
    # Operations on the selection
    # ------------------------------------------------------------------

    def copy_selected(self, clipboard: ClipboardProvider) -> PromptMetadata:
        """Copy the selected prompt's body to the clipboard.

        Raises:
            PromptNotFoundError: If nothing is selected or the file vanished.
            ClipboardError: If the clipboard rejects the text.
        """
        prompt = self._require_selected()
        return self.application.copy_prompt(prompt.name, clipboard)

    def copy_selected_and_quit(self, clipboard: ClipboardProvider) -> None:
        """QuickSelect Enter: copy, then quit. Nothing selected is an error, not a quit."""
        if self.selected is None:
            self.set_error("No prompt selected")
            return
        self.copy_selected(clipboard)
        self.quit()

    def edit_selected(self, editor: EditorLauncher) -> None:
        """Run the editor on the selected prompt, then rescan.

        Editor failures and recoverable errors, such as the file vanishing
        before the handoff, end up in the error banner. Must run while the
        terminal is handed over to the editor.
        """
        prompt = self.selected
        if prompt is None:
            return
        try:
            self.application.edit_prompt(prompt.name, editor)
        except PromptDeckError as e:
            if not (e.recoverable or isinstance(e, EditorError)):
                raise
            self.set_error(str(e))
        finally:
            self.reload()

    def delete_selected(self, force: bool = False) -> None:
        """Delete the selected prompt.

        Raises:
            InvalidInputError: If ``force`` is False.
        """
        prompt = self._require_selected()
        self._delete(prompt.name, force)

    def _delete(self, name: str, force: bool = True) -> None:
        try:
            self.application.delete_prompt(name, force)
        except PromptDeckError:
            self.reload()
            raise
        self.reload()
        self.status = f"Deleted {name}"
