"""In-memory index of prompt metadata with a filtered, selectable view.

``all`` holds every record ordered by normalized name. ``visible`` is the
subsequence of ``all`` that passes the current tag filter and search query.
Whenever ``visible`` is rebuilt the selection follows the previously
selected record if it survived; otherwise it moves to the nearest earlier
surviving record, else to the first row, and is cleared when nothing is
visible.
"""

from typing import Iterable, List, Optional

from .models import PromptMetadata


class PromptIndex:
    """Snapshot of the prompt set plus the derived visible view."""

    def __init__(self, prompts: Iterable[PromptMetadata] = ()):
        self._all: List[PromptMetadata] = []
        self._visible: List[PromptMetadata] = []
        self._selected: Optional[int] = None
        self._tag_filter: Optional[str] = None
        self._query: str = ""
        self.reload(prompts)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def all(self) -> List[PromptMetadata]:
        return list(self._all)

    @property
    def visible(self) -> List[PromptMetadata]:
        return list(self._visible)

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected

    @property
    def selected(self) -> Optional[PromptMetadata]:
        if self._selected is None:
            return None
        return self._visible[self._selected]

    @property
    def tag_filter(self) -> Optional[str]:
        return self._tag_filter

    @property
    def query(self) -> str:
        return self._query

    def all_tags(self) -> List[str]:
        """Distinct tags present in ``all``, sorted."""
        return sorted({tag for prompt in self._all for tag in prompt.tags})

    def get(self, name: str) -> Optional[PromptMetadata]:
        for prompt in self._all:
            if prompt.name == name:
                return prompt
        return None

    def __len__(self) -> int:
        return len(self._all)

    # ------------------------------------------------------------------
    # Criteria and data changes
    # ------------------------------------------------------------------

    def reload(self, prompts: Iterable[PromptMetadata]) -> None:
        """Replace ``all`` (e.g. after a rescan) and rebuild the view."""
        self._all = sorted(prompts, key=lambda p: p.name.lower())
        self._rebuild()

    def set_tag_filter(self, tag: Optional[str]) -> None:
        self._tag_filter = tag or None
        self._rebuild()

    def set_query(self, query: str) -> None:
        self._query = query
        self._rebuild()

    def refresh(self) -> None:
        """Recompute ``visible`` from unchanged data and criteria."""
        self._rebuild()

    def _is_visible(self, prompt: PromptMetadata) -> bool:
        if self._tag_filter is not None and not prompt.has_tag(self._tag_filter):
            return False
        if self._query and not prompt.matches_name(self._query):
            return False
        return True

    def _rebuild(self) -> None:
        previous = self.selected
        self._visible = [p for p in self._all if self._is_visible(p)]

        if not self._visible:
            self._selected = None
            return
        if previous is None:
            self._selected = 0
            return

        # Same record by name, else the last visible one ordered before it
        target = previous.name.lower()
        fallback = None
        for i, prompt in enumerate(self._visible):
            key = prompt.name.lower()
            if prompt.name == previous.name:
                self._selected = i
                return
            if key < target:
                fallback = i
        self._selected = fallback if fallback is not None else 0

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_next(self) -> None:
        if self._selected is not None and self._selected < len(self._visible) - 1:
            self._selected += 1

    def select_previous(self) -> None:
        if self._selected is not None and self._selected > 0:
            self._selected -= 1

    def select_name(self, name: str) -> bool:
        """Move the selection to ``name`` if it is visible."""
        for i, prompt in enumerate(self._visible):
            if prompt.name == name:
                self._selected = i
                return True
        return False
