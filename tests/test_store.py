"""Tests for the filesystem prompt store."""

import logging
import stat
import sys
from unittest import mock

import pytest

from promptdeck.errors import (
    InvalidPathError,
    PromptAlreadyExistsError,
    PromptNotFoundError,
    StorageIOError,
)
from promptdeck.models import SearchType
from promptdeck.store import PromptStore


class TestList:
    def test_empty_when_directory_missing(self, tmp_path):
        assert PromptStore(tmp_path / "nowhere").list() == []

    def test_lists_sorted_by_name(self, store, write_prompt):
        write_prompt("code-review", "Code Review", ["code", "review"])
        write_prompt("bug-report", "Bug Report", ["bug", "issue"])

        prompts = store.list()

        assert [p.name for p in prompts] == ["bug-report", "code-review"]
        assert prompts[0].display_name == "Bug Report"
        assert prompts[0].tags == ["bug", "issue"]
        assert prompts[1].tags == ["code", "review"]

    def test_skips_unparseable_with_warning(self, store, write_prompt, caplog):
        write_prompt("good")
        (store.prompts_dir / "broken.md").write_text("no header here", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="promptdeck.store"):
            prompts = store.list()

        assert [p.name for p in prompts] == ["good"]
        assert "broken.md" in caplog.text

    def test_ignores_non_markdown_and_hidden(self, store, write_prompt):
        write_prompt("visible")
        (store.prompts_dir / "notes.txt").write_text('---\nname: "x"\n---\n', encoding="utf-8")
        (store.prompts_dir / ".visible.md.tmp").write_text('---\nname: "x"\n---\n', encoding="utf-8")
        (store.prompts_dir / "subdir.md").mkdir()

        assert [p.name for p in store.list()] == ["visible"]

    def test_markdown_suffix_accepted(self, store):
        (store.prompts_dir / "long-form.markdown").write_text('---\nname: "Long"\n---\n', encoding="utf-8")
        prompts = store.list()
        assert prompts[0].name == "long-form"
        assert prompts[0].file_path == "long-form.markdown"


class TestFind:
    def test_find_normalizes_query(self, store, write_prompt):
        write_prompt("code-review", "Code Review")
        assert store.find_by_name("Code Review").name == "code-review"
        assert store.find_by_name("missing") is None

    def test_read_missing_raises_not_found(self, store):
        with pytest.raises(PromptNotFoundError):
            store.read("ghost.md")


class TestResolve:
    @pytest.mark.parametrize("path", [
        "../escape.md",
        "a/../../escape.md",
        "/etc/passwd",
        "..",
        ".",
        "",
    ])
    def test_rejects_escapes(self, store, path):
        with pytest.raises(InvalidPathError):
            store.resolve(path)

    def test_accepts_plain_file(self, store):
        assert store.resolve("x.md") == (store.prompts_dir / "x.md").resolve()


class TestSearch:
    @pytest.fixture
    def library(self, write_prompt):
        write_prompt("alpha", "Alpha", ["python"], "Explain decorators.\n")
        write_prompt("beta", "Beta", ["rust"], "Mentions alpha in the body.\n")
        write_prompt("gamma", "Gamma", [], "Nothing to see.\n")

    def test_name_only(self, store, library):
        assert [p.name for p in store.search("alpha", SearchType.NAME)] == ["alpha"]

    def test_tag_only(self, store, library):
        assert [p.name for p in store.search("RUST", SearchType.TAG)] == ["beta"]

    def test_content_only(self, store, library):
        assert [p.name for p in store.search("decorators", SearchType.CONTENT)] == ["alpha"]

    def test_all_is_union_in_order(self, store, library):
        assert [p.name for p in store.search("alpha")] == ["alpha", "beta"]

    def test_no_match(self, store, library):
        assert store.search("zzz") == []


class TestMutations:
    def test_create_writes_file(self, store):
        text = '---\nname: "test-prompt"\ntags: []\n---\n'
        meta = store.create("test-prompt", text)

        assert meta.name == "test-prompt"
        assert meta.file_path == "test-prompt.md"
        assert (store.prompts_dir / "test-prompt.md").read_text(encoding="utf-8") == text

    def test_create_duplicate_fails(self, store, write_prompt):
        write_prompt("test-prompt")
        with pytest.raises(PromptAlreadyExistsError):
            store.create("test-prompt", '---\nname: "test-prompt"\n---\n')

    def test_create_rejects_path_separators(self, store):
        with pytest.raises(InvalidPathError):
            store.create("a/b", '---\nname: "x"\n---\n')

    def test_create_makes_missing_directory(self, tmp_path):
        store = PromptStore(tmp_path / "fresh")
        store.create("x", '---\nname: "x"\n---\n')
        assert (tmp_path / "fresh" / "prompts" / "x.md").exists()

    def test_delete(self, store, write_prompt):
        path = write_prompt("gone")
        store.delete("gone.md")
        assert not path.exists()

    def test_delete_missing(self, store):
        with pytest.raises(PromptNotFoundError):
            store.delete("ghost.md")

    def test_rename(self, store, write_prompt):
        write_prompt("old")
        new_path = store.rename("old.md", "new")
        assert new_path == "new.md"
        assert not (store.prompts_dir / "old.md").exists()
        assert (store.prompts_dir / "new.md").exists()

    def test_rename_onto_existing_fails(self, store, write_prompt):
        write_prompt("a")
        write_prompt("b")
        with pytest.raises(PromptAlreadyExistsError):
            store.rename("a.md", "b")
        assert (store.prompts_dir / "a.md").exists()


class TestAtomicWrite:
    def test_write_replaces_content(self, store, write_prompt):
        path = write_prompt("x", body="old\n")
        store.write("x.md", '---\nname: "x"\n---\nnew\n')
        assert path.read_text(encoding="utf-8").endswith("new\n")

    def test_failed_rename_leaves_original(self, store, write_prompt):
        """An interrupted write between temp file and rename keeps the old file."""
        path = write_prompt("x", body="original\n")
        before = path.read_text(encoding="utf-8")

        with mock.patch("promptdeck.store.os.replace", side_effect=OSError("disk on fire")):
            with pytest.raises(StorageIOError):
                store.write("x.md", '---\nname: "x"\n---\nreplacement\n')

        assert path.read_text(encoding="utf-8") == before
        assert not (store.prompts_dir / ".x.md.tmp").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    def test_write_keeps_permissions(self, store, write_prompt):
        path = write_prompt("x", body="old\n")
        path.chmod(0o640)

        store.write("x.md", '---\nname: "x"\n---\nnew\n')

        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_write_rejects_escape(self, store):
        with pytest.raises(InvalidPathError):
            store.write("../outside.md", "x")
