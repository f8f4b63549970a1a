"""Prompt library operations shared by the command line and the TUI.

``PromptApplication`` wraps a ``PromptStore`` with name resolution,
template generation and tag editing. The clipboard and editor are passed in
by the caller for each operation that needs them; the application keeps no
handle on either.
"""

import logging
from collections import Counter
from dataclasses import replace
from typing import List, Optional, Tuple

from . import frontmatter, templates
from .clipboard import ClipboardProvider
from .editor import EditorLauncher
from .errors import ClipboardError, InvalidInputError, PromptNotFoundError
from .models import PromptMetadata, PromptType, SearchType, dedupe_tags, normalize_name, normalize_tag
from .store import PromptStore

logger = logging.getLogger(__name__)


class PromptApplication:
    """High-level operations over the prompt library."""

    def __init__(self, store: PromptStore):
        self.store = store

    def find_prompt(self, name: str) -> PromptMetadata:
        """Look a prompt up by (normalized) name.

        Raises:
            PromptNotFoundError: If no prompt matches.
        """
        metadata = self.store.find_by_name(name)
        if metadata is None:
            raise PromptNotFoundError(name)
        return metadata

    def list_prompts(
        self,
        tag: Optional[str] = None,
        prompt_type: Optional[PromptType] = None,
    ) -> List[PromptMetadata]:
        prompts = self.store.list()
        if tag:
            prompts = [p for p in prompts if p.has_tag(tag)]
        if prompt_type is not None:
            prompts = [p for p in prompts if p.prompt_type is prompt_type]
        return prompts

    def tags(self) -> List[Tuple[str, int]]:
        """Distinct tags with the number of prompts carrying each, sorted by tag."""
        counts = Counter(tag for p in self.store.list() for tag in p.tags)
        return sorted(counts.items())

    def get_prompt(self, name: str) -> Tuple[PromptMetadata, str]:
        """Metadata and body of a prompt."""
        metadata = self.find_prompt(name)
        _, body = self.store.read_prompt(metadata)
        return metadata, body

    def search_prompts(self, query: str, kind: SearchType = SearchType.ALL) -> List[PromptMetadata]:
        return self.store.search(query, kind)

    def create_prompt(
        self,
        name: str,
        template: Optional[str] = None,
        content: Optional[str] = None,
        prompt_type: Optional[PromptType] = None,
    ) -> PromptMetadata:
        """Create a prompt file from a template.

        Raises:
            InvalidInputError: If the name normalizes to nothing or the
                template is unknown.
            PromptAlreadyExistsError: If the prompt exists.
        """
        display_name = name.strip()
        normalized = normalize_name(display_name)
        if not normalized:
            raise InvalidInputError("name", "Prompt name must not be empty")
        text = templates.generate(display_name, template, content, prompt_type=prompt_type)
        return self.store.create(normalized, text)

    def edit_prompt(self, name: str, editor: EditorLauncher) -> None:
        """Open a prompt in the external editor and wait for it to exit."""
        metadata = self.find_prompt(name)
        editor.launch(self.store.absolute_path(metadata))

    def delete_prompt(self, name: str, force: bool) -> None:
        """Delete a prompt; refuses unless ``force`` is set.

        Raises:
            PromptNotFoundError: If the prompt doesn't exist.
            InvalidInputError: If ``force`` is False.
        """
        metadata = self.find_prompt(name)
        if not force:
            raise InvalidInputError(
                "confirmation",
                "Deletion cancelled. Use --force to skip confirmation.",
            )
        self.store.delete(metadata.file_path)

    def copy_text(self, text: str, clipboard: ClipboardProvider) -> None:
        """Hand text to the clipboard.

        Raises:
            ClipboardError: If the provider reports failure or raises.
        """
        try:
            ok = clipboard.copy(text)
        except Exception as e:
            raise ClipboardError(str(e)) from e
        if not ok:
            reason = getattr(clipboard, "last_error", None) or f"copy via {clipboard.name} failed"
            raise ClipboardError(reason)

    def read_clipboard(self, clipboard: ClipboardProvider) -> str:
        """Current clipboard text, used to seed a new prompt's body.

        Raises:
            ClipboardError: If the provider cannot read or the clipboard is empty.
        """
        try:
            text = clipboard.paste()
        except Exception as e:
            raise ClipboardError(str(e)) from e
        if text is None:
            reason = getattr(clipboard, "last_error", None) or f"paste via {clipboard.name} failed"
            raise ClipboardError(reason)
        if not text.strip():
            raise ClipboardError("clipboard is empty")
        return text

    def copy_prompt(self, name: str, clipboard: ClipboardProvider) -> PromptMetadata:
        """Copy a prompt's body to the clipboard."""
        metadata, body = self.get_prompt(name)
        self.copy_text(body, clipboard)
        logger.info(f"Copied {metadata.name} via {clipboard.name}")
        return metadata

    def rename_prompt(self, name: str, new_name: str) -> PromptMetadata:
        """Rename a prompt file and update its header display name."""
        metadata = self.find_prompt(name)
        display_name = new_name.strip()
        normalized = normalize_name(display_name)
        if not normalized:
            raise InvalidInputError("name", "New name must not be empty")

        header, body = self.store.read_prompt(metadata)
        header["name"] = display_name
        new_path = self.store.rename(metadata.file_path, normalized)
        self.store.write(new_path, frontmatter.serialize(header, body))
        return PromptMetadata.from_header(header, new_path)

    def update_prompt_tags(self, name: str, tags: List[str]) -> PromptMetadata:
        """Replace a prompt's tag list, preserving body and other header keys."""
        metadata = self.find_prompt(name)
        text = self.store.read(metadata.file_path)
        cleaned = dedupe_tags(tags)
        self.store.write(metadata.file_path, frontmatter.update_tags(text, cleaned))
        return replace(metadata, tags=cleaned)

    def add_tag(self, name: str, tag: str) -> PromptMetadata:
        """Append a tag (normalized); a tag already present is left in place."""
        cleaned = normalize_tag(tag)
        if not cleaned:
            raise InvalidInputError("tag", "Tag must not be empty")
        metadata = self.find_prompt(name)
        return self.update_prompt_tags(name, metadata.tags + [cleaned])

    def remove_tag(self, name: str, tag: str) -> PromptMetadata:
        """Drop a tag.

        Raises:
            PromptNotFoundError: If the prompt is missing.
            InvalidInputError: If the prompt doesn't carry the tag.
        """
        metadata = self.find_prompt(name)
        if tag not in metadata.tags:
            raise InvalidInputError("tag", f"'{metadata.name}' has no tag '{tag}'")
        return self.update_prompt_tags(name, [t for t in metadata.tags if t != tag])
