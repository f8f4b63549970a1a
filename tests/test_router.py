"""Tests for key routing and handler precedence."""

from unittest import mock

import pytest

from promptdeck.errors import StorageIOError
from promptdeck.tui import keys
from promptdeck.tui.dialogs import ConfirmationDialog, CreateDialog, TagEditDialog, TagFilterDialog
from promptdeck.tui.keys import Key
from promptdeck.tui.router import (
    HANDLERS,
    ConfirmationHandler,
    CreateHandler,
    ErrorBannerHandler,
    InputRouter,
    SearchHandler,
    TagEditHandler,
    TagFilterHandler,
    TopLevelHandler,
)
from promptdeck.tui.state import AppMode, AppState, PendingAction

ENTER = Key(keys.ENTER)
ESC = Key(keys.ESCAPE)
DOWN = Key(keys.DOWN)


@pytest.fixture
def library(write_prompt):
    write_prompt("alpha", "Alpha", ["a"], "alpha body\n")
    write_prompt("beta", "Beta", ["b"], "beta body\n")


@pytest.fixture
def clipboard():
    clipboard = mock.Mock()
    clipboard.name = "fake"
    clipboard.copy.return_value = True
    clipboard.last_error = None
    return clipboard


@pytest.fixture
def state(app, library):
    return AppState(app, AppMode.MANAGEMENT)


@pytest.fixture
def router(state, clipboard):
    return InputRouter(state, clipboard)


def press(router, text):
    for char in text:
        router.dispatch(Key.of(char))


class TestPrecedence:
    def test_order(self):
        assert [type(h) for h in HANDLERS] == [
            ErrorBannerHandler,
            ConfirmationHandler,
            TagFilterHandler,
            TagEditHandler,
            CreateHandler,
            SearchHandler,
            TopLevelHandler,
        ]

    def test_banner_swallows_next_key(self, router, state):
        state.show_delete_confirmation()
        state.set_error("boom")

        router.dispatch(Key.of("y"))

        assert not state.has_error
        assert isinstance(state.dialog, ConfirmationDialog)

    def test_dialog_beats_search(self, router, state, store):
        state.activate_search()
        state.show_delete_confirmation()

        router.dispatch(Key.of("y"))

        assert state.search_query == ""
        assert not (store.prompts_dir / "alpha.md").exists()

    def test_search_beats_top_level(self, router, state):
        router.dispatch(Key.of("/"))
        press(router, "qd")
        assert state.search_query == "qd"
        assert not state.should_quit
        assert state.dialog is None

    def test_active_handler(self, router, state):
        assert isinstance(router.active_handler(), TopLevelHandler)
        state.open_tag_filter()
        assert isinstance(router.active_handler(), TagFilterHandler)


class TestTopLevel:
    def test_quit_keys(self, router, state):
        router.dispatch(Key.of("q"))
        assert state.should_quit

    def test_escape_quits(self, router, state):
        router.dispatch(ESC)
        assert state.should_quit

    def test_navigation(self, router, state):
        router.dispatch(Key.of("j"))
        assert state.selected.name == "beta"
        router.dispatch(Key.of("k"))
        assert state.selected.name == "alpha"

    def test_mode_toggle(self, router, state):
        router.dispatch(Key.of("m"))
        assert state.mode is AppMode.QUICK_SELECT

    def test_management_keys_ignored_in_quick_select(self, app, library, clipboard):
        state = AppState(app, AppMode.QUICK_SELECT)
        router = InputRouter(state, clipboard)
        press(router, "dnte")
        assert state.dialog is None
        assert state.pending_action is None

    def test_edit_queues_pending_action(self, router, state):
        router.dispatch(Key.of("e"))
        assert state.pending_action is PendingAction.EDIT_SELECTED

    def test_edit_without_selection_does_nothing(self, router, state):
        state.set_search_query("zzz")
        router.dispatch(Key.of("e"))
        assert state.pending_action is None

    def test_enter_ignored_in_management(self, router, state, clipboard):
        router.dispatch(ENTER)
        clipboard.copy.assert_not_called()
        assert not state.should_quit

    def test_quick_select_enter_copies_and_quits(self, app, library, clipboard):
        state = AppState(app)
        router = InputRouter(state, clipboard)
        router.dispatch(Key.of("j"))
        router.dispatch(ENTER)
        clipboard.copy.assert_called_once_with("beta body\n")
        assert state.should_quit


class TestSearch:
    def test_typing_backspace_and_escape(self, router, state):
        router.dispatch(Key.of("/"))
        press(router, "bex")
        router.dispatch(Key(keys.BACKSPACE))
        assert state.search_query == "be"
        assert [p.name for p in state.index.visible] == ["beta"]

        router.dispatch(ESC)
        assert not state.search_active
        assert len(state.index.visible) == 2
        assert not state.should_quit

    def test_empty_result_enter_shows_banner(self, app, library, clipboard):
        state = AppState(app)
        router = InputRouter(state, clipboard)
        router.dispatch(Key.of("/"))
        press(router, "zzz")

        router.dispatch(ENTER)

        assert state.error == "No prompt selected"
        assert not state.should_quit


class TestDialogs:
    def test_tag_filter_flow(self, router, state):
        router.dispatch(Key.of("f"))
        router.dispatch(DOWN)
        router.dispatch(ENTER)
        assert state.dialog is None
        assert state.index.tag_filter == "b"

        router.dispatch(Key.of("f"))
        router.dispatch(Key.of("c"))
        assert state.dialog is None
        assert state.index.tag_filter is None

    def test_tag_edit_flow(self, router, state):
        router.dispatch(Key.of("t"))
        press(router, "a")
        press(router, "new")
        router.dispatch(ENTER)
        assert state.index.get("alpha").tags == ["a", "new"]
        assert isinstance(state.dialog, TagEditDialog)

        router.dispatch(Key.of("r"))
        router.dispatch(ENTER)
        assert state.index.get("alpha").tags == ["new"]

        router.dispatch(ESC)
        assert state.dialog is None

    def test_create_flow(self, router, state, store):
        router.dispatch(Key.of("n"))
        press(router, "hello")
        router.dispatch(ENTER)

        assert state.dialog is None
        assert (store.prompts_dir / "hello.md").exists()
        assert state.selected.name == "hello"

    def test_create_failure_keeps_dialog(self, router, state):
        router.dispatch(Key.of("n"))
        press(router, "alpha")
        router.dispatch(ENTER)

        assert state.error.startswith("Failed to create prompt:")
        assert isinstance(state.dialog, CreateDialog)

        router.dispatch(Key.of("x"))  # dismisses the banner
        assert not state.has_error
        assert state.dialog.filename == "alpha"

    def test_delete_cancel(self, router, state, store):
        router.dispatch(Key.of("d"))
        router.dispatch(Key.of("n"))
        assert state.dialog is None
        assert (store.prompts_dir / "alpha.md").exists()


class TestErrors:
    def test_recoverable_error_becomes_banner(self, app, library, clipboard):
        clipboard.copy.return_value = False
        clipboard.last_error = "no display"
        state = AppState(app)
        router = InputRouter(state, clipboard)

        router.dispatch(ENTER)

        assert state.error == "Clipboard error: no display"
        assert not state.should_quit

    def test_unrecoverable_error_propagates(self, router, state):
        with mock.patch.object(state, "next", side_effect=StorageIOError("disk gone")):
            with pytest.raises(StorageIOError):
                router.dispatch(Key.of("j"))
        assert not state.has_error

    def test_status_cleared_on_next_key(self, router, state):
        state.status = "Created x"
        router.dispatch(Key.of("j"))
        assert state.status is None
