"""Tests for the prompt index: filtering, search and selection stability."""

from promptdeck.index import PromptIndex
from promptdeck.models import PromptMetadata


def _meta(name, tags=(), display=None):
    return PromptMetadata(name=name, display_name=display or name.upper(), tags=list(tags))


def _names(prompts):
    return [p.name for p in prompts]


class TestVisible:
    def test_filter_then_search(self):
        """Tag filter and query compose, and clearing each restores the view."""
        index = PromptIndex([_meta("n1", ["a"]), _meta("n2", ["a", "b"]), _meta("n3", ["b"])])

        index.set_tag_filter("b")
        assert _names(index.visible) == ["n2", "n3"]

        index.set_query("3")
        assert _names(index.visible) == ["n3"]

        index.set_query("")
        assert _names(index.visible) == ["n2", "n3"]

        index.set_tag_filter(None)
        assert _names(index.visible) == ["n1", "n2", "n3"]

    def test_query_matches_display_name_only(self):
        index = PromptIndex([_meta("x", ["needle"], display="Alpha"), _meta("y", display="Needle Pin")])
        index.set_query("needle")
        assert _names(index.visible) == ["y"]

    def test_sorted_by_name(self):
        index = PromptIndex([_meta("c"), _meta("a"), _meta("b")])
        assert _names(index.all) == ["a", "b", "c"]

    def test_all_tags(self):
        index = PromptIndex([_meta("a", ["z", "x"]), _meta("b", ["x", "y"])])
        assert index.all_tags() == ["x", "y", "z"]

    def test_get(self):
        index = PromptIndex([_meta("a")])
        assert index.get("a").name == "a"
        assert index.get("b") is None


class TestSelection:
    def test_first_row_selected(self):
        index = PromptIndex([_meta("a"), _meta("b")])
        assert index.selected_index == 0
        assert index.selected.name == "a"

    def test_empty_has_no_selection(self):
        index = PromptIndex([])
        assert index.selected is None
        assert index.selected_index is None
        index.select_next()
        index.select_previous()
        assert index.selected is None

    def test_navigation_clamps(self):
        index = PromptIndex([_meta("a"), _meta("b")])
        index.select_previous()
        assert index.selected.name == "a"
        index.select_next()
        index.select_next()
        assert index.selected.name == "b"

    def test_selection_follows_record_through_filter(self):
        index = PromptIndex([_meta("n1", ["a"]), _meta("n2", ["a", "b"]), _meta("n3", ["b"])])
        index.select_name("n2")

        index.set_tag_filter("b")
        assert index.selected.name == "n2"
        assert index.selected_index == 0

        index.set_tag_filter(None)
        assert index.selected.name == "n2"
        assert index.selected_index == 1

    def test_falls_back_to_nearest_earlier(self):
        index = PromptIndex([_meta("a"), _meta("b"), _meta("c"), _meta("d")])
        index.select_name("c")

        index.reload([_meta("a"), _meta("b"), _meta("d")])

        assert index.selected.name == "b"

    def test_falls_back_to_first_when_nothing_earlier(self):
        index = PromptIndex([_meta("a"), _meta("b"), _meta("c")])
        index.select_name("a")
        index.reload([_meta("b"), _meta("c")])
        assert index.selected.name == "b"

    def test_cleared_when_nothing_visible(self):
        index = PromptIndex([_meta("a")])
        index.set_query("zzz")
        assert index.selected is None
        index.set_query("")
        assert index.selected.name == "a"

    def test_select_name_invisible(self):
        index = PromptIndex([_meta("a", ["t"]), _meta("b")])
        index.set_tag_filter("t")
        assert index.select_name("b") is False
        assert index.selected.name == "a"
