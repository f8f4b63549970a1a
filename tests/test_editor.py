"""Tests for editor resolution and launching."""

import subprocess
from pathlib import Path
from unittest import mock

import pytest

from promptdeck.editor import EditorLauncher, get_editor
from promptdeck.errors import EditorError


class TestGetEditor:
    def test_configured_wins(self, monkeypatch):
        monkeypatch.setenv("EDITOR", "vim")
        assert get_editor("nano") == "nano"

    def test_editor_then_visual(self, monkeypatch):
        monkeypatch.setenv("EDITOR", "vim")
        monkeypatch.setenv("VISUAL", "emacs")
        assert get_editor() == "vim"
        monkeypatch.delenv("EDITOR")
        assert get_editor() == "emacs"

    def test_fallback(self, monkeypatch):
        monkeypatch.delenv("EDITOR", raising=False)
        monkeypatch.delenv("VISUAL", raising=False)
        assert get_editor() == "vi"


class TestEditorLauncher:
    def test_argv_splits_command(self, tmp_path):
        path = tmp_path / "p.md"
        argv = EditorLauncher("code --wait").build_argv(path)
        assert argv == ["code", "--wait", str(path)]

    def test_quoted_command(self, tmp_path):
        argv = EditorLauncher('"/opt/My Editor/bin/edit" -n').build_argv(tmp_path / "p.md")
        assert argv[:2] == ["/opt/My Editor/bin/edit", "-n"]

    def test_blank_command(self, tmp_path):
        with pytest.raises(EditorError):
            EditorLauncher("   ").build_argv(tmp_path / "p.md")

    def test_unbalanced_quotes(self, tmp_path):
        with pytest.raises(EditorError):
            EditorLauncher('vim "oops').build_argv(tmp_path / "p.md")

    def test_launch_passes_absolute_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with mock.patch("promptdeck.editor.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess([], 0)
            EditorLauncher("nano").launch(Path("p.md"))

        argv = run.call_args.args[0]
        assert argv[0] == "nano"
        assert Path(argv[1]).is_absolute()

    def test_nonzero_exit(self, tmp_path):
        with mock.patch("promptdeck.editor.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess([], 2)
            with pytest.raises(EditorError, match="Editor exited with code 2"):
                EditorLauncher("nano").launch(tmp_path / "p.md")

    def test_spawn_failure(self, tmp_path):
        with mock.patch("promptdeck.editor.subprocess.run", side_effect=FileNotFoundError("no such editor")):
            with pytest.raises(EditorError, match="cannot start"):
                EditorLauncher("nope").launch(tmp_path / "p.md")
