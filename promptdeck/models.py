"""Data models for the prompt library.

A prompt is a markdown file whose header carries a display name and a tag
list. The normalized name (derived from the file stem) is the identity the
rest of the system addresses prompts by; the display name is presentation
only.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, List, Optional

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Normalize a display name into the key a prompt is stored under.

    Lowercases, trims, and replaces every run of whitespace with a single
    ``-``. Idempotent: ``normalize_name(normalize_name(s)) == normalize_name(s)``.
    """
    return _WHITESPACE_RUN.sub("-", name.strip().lower())


def normalize_tag(tag: str) -> str:
    """Normalize a user-entered tag (trimmed, lowercase)."""
    return tag.strip().lower()


def dedupe_tags(tags: Iterable[Any]) -> List[str]:
    """Coerce tags to strings, drop empties and duplicates, keep first-seen order."""
    result: List[str] = []
    for tag in tags:
        if tag is None:
            continue
        text = str(tag).strip()
        if text and text not in result:
            result.append(text)
    return result


class SearchType(Enum):
    """Which part of a prompt a search query is matched against."""
    NAME = "name"
    TAG = "tag"
    CONTENT = "content"
    ALL = "all"


class PromptType(Enum):
    """Which part of a composed prompt a file supplies, stored as the header's ``type``."""
    WHOLE = "whole"
    INSTRUCTION = "instruction"
    CONTEXT = "context"
    INPUT_DATA = "input_data"
    OUTPUT_INDICATOR = "output_indicator"
    ETC = "etc"

    @classmethod
    def from_header(cls, value: Any) -> Optional["PromptType"]:
        """Read a header value; absent or unrecognized types yield None."""
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass
class PromptMetadata:
    """Metadata for one prompt file.

    Attributes:
        name: Normalized name; equals the stem of ``file_path``.
        display_name: Human-readable name from the header.
        tags: Ordered, de-duplicated tag list.
        file_path: Path relative to the prompts directory (POSIX form).
        prompt_type: Header ``type``, None when absent or unrecognized.
    """

    name: str
    display_name: str
    tags: List[str] = field(default_factory=list)
    file_path: str = ""
    prompt_type: Optional[PromptType] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Prompt name must not be empty")
        self.tags = dedupe_tags(self.tags)
        if not self.file_path:
            self.file_path = f"{self.name}.md"

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def matches_name(self, query: str) -> bool:
        """Case-insensitive substring match against the display name."""
        return query.lower() in self.display_name.lower()

    def matches_tag(self, query: str) -> bool:
        """Case-insensitive substring match against any tag."""
        needle = query.lower()
        return any(needle in tag.lower() for tag in self.tags)

    @classmethod
    def from_header(cls, header: Dict[str, Any], file_path: str) -> "PromptMetadata":
        """Build metadata from a parsed header and the file's relative path."""
        stem = PurePosixPath(file_path).stem
        return cls(
            name=normalize_name(stem),
            display_name=str(header.get("name") or stem),
            tags=list(header.get("tags") or []),
            file_path=file_path,
            prompt_type=PromptType.from_header(header.get("type")),
        )
