"""promptdeck: a terminal prompt-library manager.

Prompts are markdown files with a small YAML header (display name and
tags) kept under ``<base>/prompts/``. ``PromptApplication`` is the API
shared by the command line and the interactive browser.
"""

from .application import PromptApplication
from .errors import PromptDeckError
from .models import PromptMetadata, SearchType
from .store import PromptStore

__version__ = "0.1.0"

__all__ = [
    "PromptApplication",
    "PromptDeckError",
    "PromptMetadata",
    "PromptStore",
    "SearchType",
]
