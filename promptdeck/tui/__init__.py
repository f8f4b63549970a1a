"""Interactive full-screen prompt browser."""

from .runner import PromptDeckTUI, run_tui
from .state import AppMode, AppState

__all__ = ["AppMode", "AppState", "PromptDeckTUI", "run_tui"]
