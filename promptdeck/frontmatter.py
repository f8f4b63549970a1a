"""Markdown frontmatter parsing and serialization.

Prompt files start with a YAML header between two ``---`` lines::

    ---
    name: "Code Review"
    tags: ["code", "review"]
    ---
    # Body text...

``parse`` and ``serialize`` are inverses for headers whose tag entries hold
no characters YAML reserves. ``update_tags`` rewrites only the tag entry of
an existing file so unknown header keys and the body survive byte-for-byte.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .constants import FRONTMATTER_DELIMITER
from .errors import InvalidFormatError
from .models import dedupe_tags

_DELIMITER_LINE = re.compile(r"^---[ \t]*$")


def _split_lines(text: str) -> List[str]:
    """Split keeping line endings so offsets can be rebuilt exactly."""
    return text.splitlines(keepends=True)


def _locate_header(text: str) -> Tuple[List[str], int]:
    """Find the header block.

    Returns:
        Tuple of (all lines with endings, index of the closing delimiter line).

    Raises:
        InvalidFormatError: If the text does not open with a delimited header.
    """
    lines = _split_lines(text)
    if not lines or not _DELIMITER_LINE.match(lines[0].rstrip("\r\n")):
        raise InvalidFormatError("missing frontmatter header")
    for i in range(1, len(lines)):
        if _DELIMITER_LINE.match(lines[i].rstrip("\r\n")):
            return lines, i
    raise InvalidFormatError("unterminated frontmatter header")


def parse(text: str) -> Tuple[Dict[str, Any], str]:
    """Parse a prompt file into (header, body).

    The header must be a mapping with a non-empty ``name``. ``tags`` is
    optional and normalized to a de-duplicated list of strings.

    Raises:
        InvalidFormatError: If the header is absent or malformed.
    """
    lines, closing = _locate_header(text)
    raw_header = "".join(lines[1:closing])
    body = "".join(lines[closing + 1:])

    try:
        header = yaml.safe_load(raw_header) if raw_header.strip() else {}
    except yaml.YAMLError as e:
        raise InvalidFormatError(f"YAML parse error: {e}") from e

    if not isinstance(header, dict):
        raise InvalidFormatError(f"expected a mapping, got {type(header).__name__}")

    name = header.get("name")
    if name is None or not str(name).strip():
        raise InvalidFormatError("header has no 'name'")
    header["name"] = str(name)

    tags = header.get("tags")
    if tags is None:
        tags = []
    if not isinstance(tags, list):
        raise InvalidFormatError("'tags' must be a list")
    header["tags"] = dedupe_tags(tags)

    return header, body


def format_tags(tags: List[str]) -> str:
    """Render a tag list as a YAML flow sequence of double-quoted scalars."""
    return "[" + ", ".join(json.dumps(tag, ensure_ascii=False) for tag in tags) + "]"


def serialize(header: Dict[str, Any], body: str) -> str:
    """Serialize a header and body back into prompt file text."""
    lines = [
        FRONTMATTER_DELIMITER,
        f"name: {json.dumps(str(header['name']), ensure_ascii=False)}",
        f"tags: {format_tags(dedupe_tags(header.get('tags') or []))}",
    ]
    extra = {k: v for k, v in header.items() if k not in ("name", "tags")}
    if extra:
        dumped = yaml.safe_dump(
            extra,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
        lines.extend(dumped.rstrip("\n").split("\n"))
    lines.append(FRONTMATTER_DELIMITER)
    return "\n".join(lines) + "\n" + body


def _tags_span(header_text: str) -> Optional[Tuple[int, int]]:
    """Line range ``[start, end)`` of the top-level ``tags`` entry, or None.

    The range comes from the composed YAML node, so multi-line flow lists
    and block lists with comments or blank lines between items are covered.
    """
    try:
        root = yaml.compose(header_text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise InvalidFormatError(f"YAML parse error: {e}") from e
    if not isinstance(root, yaml.MappingNode):
        return None
    for key_node, value_node in root.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == "tags":
            end = value_node.end_mark
            # A node closed at column 0 ends before that line starts
            return key_node.start_mark.line, end.line + (1 if end.column else 0)
    return None


def update_tags(text: str, tags: List[str]) -> str:
    """Replace the tag list in ``text``, touching nothing else.

    The body and every other header line are preserved byte-for-byte. The
    old entry, whatever its style, becomes a single flow-style line.

    Raises:
        InvalidFormatError: If ``text`` is not a valid prompt file, or the
            rewritten header would not read back with ``tags``.
    """
    # Validate first so a broken header is never rewritten
    parse(text)
    lines, closing = _locate_header(text)
    newline = "\r\n" if lines[0].endswith("\r\n") else "\n"
    cleaned = dedupe_tags(tags)
    new_line = f"tags: {format_tags(cleaned)}{newline}"

    header_lines = lines[1:closing]
    span = _tags_span("".join(header_lines))
    if span is None:
        header_lines = header_lines + [new_line]
    else:
        start, end = span
        header_lines = header_lines[:start] + [new_line] + header_lines[end:]

    result = "".join([lines[0]] + header_lines + lines[closing:])
    header, _ = parse(result)
    if header["tags"] != cleaned:
        raise InvalidFormatError("tag rewrite did not round-trip")
    return result
