"""Shared constants for promptdeck."""

from pathlib import Path

# Subdirectory of the base path that holds the prompt files
PROMPTS_DIR = "prompts"

# File extensions treated as prompts
PROMPT_SUFFIXES = (".md", ".markdown")

# Default suffix for newly created prompts
DEFAULT_SUFFIX = ".md"

DEFAULT_STORAGE_PATH = Path.home() / ".promptdeck"

# Header delimiter line
FRONTMATTER_DELIMITER = "---"
