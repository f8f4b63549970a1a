"""Pytest configuration for promptdeck tests.

Run tests with: pytest tests/
"""

import sys
from pathlib import Path

import pytest

# Add repository root to path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from promptdeck.application import PromptApplication  # noqa: E402
from promptdeck.store import PromptStore  # noqa: E402


def make_prompt_text(display_name, tags=(), body="", extra=""):
    """Prompt file text in the on-disk format."""
    tag_list = ", ".join(f'"{t}"' for t in tags)
    return f'---\nname: "{display_name}"\ntags: [{tag_list}]\n{extra}---\n{body}'


@pytest.fixture
def store(tmp_path):
    s = PromptStore(tmp_path)
    s.ensure_dir()
    return s


@pytest.fixture
def write_prompt(store):
    """Write ``<stem>.md`` into the store's prompts directory."""

    def _write(stem, display_name=None, tags=(), body="", extra=""):
        path = store.prompts_dir / f"{stem}.md"
        path.write_text(
            make_prompt_text(display_name or stem, tags, body, extra),
            encoding="utf-8",
        )
        return path

    return _write


@pytest.fixture
def app(store):
    return PromptApplication(store)
