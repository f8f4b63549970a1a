"""Tests for new-prompt templates and error messages."""

import pytest

from promptdeck import frontmatter, templates
from promptdeck.errors import (
    EditorError,
    InvalidInputError,
    PromptNotFoundError,
    StorageIOError,
)
from promptdeck.models import PromptType


class TestGenerate:
    def test_none(self):
        header, body = frontmatter.parse(templates.generate("test-prompt"))
        assert header == {"name": "test-prompt", "tags": []}
        assert body == ""

    def test_default(self):
        _, body = frontmatter.parse(templates.generate("Code Review", "default"))
        assert body == "# Code Review\n\n"

    def test_basic_sections_in_order(self):
        _, body = frontmatter.parse(templates.generate("x", "basic"))
        positions = [body.index(s) for s in ("# Instruction", "# Context", "# Input Data", "# Output Indicator")]
        assert positions == sorted(positions)

    def test_template_name_case_insensitive(self):
        _, body = frontmatter.parse(templates.generate("x", "BASIC"))
        assert "# Instruction" in body

    def test_content_after_template(self):
        _, body = frontmatter.parse(templates.generate("T", "default", content="Extra"))
        assert body == "# T\n\nExtra\n"

    def test_initial_tags(self):
        header, _ = frontmatter.parse(templates.generate("x", tags=["a", "b"]))
        assert header["tags"] == ["a", "b"]

    def test_prompt_type_in_header(self):
        header, _ = frontmatter.parse(templates.generate("x", prompt_type=PromptType.OUTPUT_INDICATOR))
        assert header["type"] == "output_indicator"

    def test_unknown(self):
        with pytest.raises(InvalidInputError) as exc_info:
            templates.generate("x", "fancy")
        assert "Unknown template: fancy" in str(exc_info.value)
        assert exc_info.value.field_name == "template"


class TestErrors:
    def test_recoverable_flags(self):
        assert PromptNotFoundError("x").recoverable
        assert InvalidInputError("f", "d").recoverable
        assert not StorageIOError("d").recoverable
        assert not EditorError("d").recoverable

    def test_permission_hint(self):
        error = StorageIOError("cannot write x", PermissionError("denied"))
        assert "Permission denied" in error.user_message()

    def test_user_message_without_hint(self):
        assert EditorError("boom").user_message() == "Editor error: boom"
