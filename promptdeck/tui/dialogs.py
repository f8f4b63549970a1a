"""Dialog state machines for the interactive surface.

Each dialog consumes ``Key`` values and reports what the user decided as a
``DialogResult``; applying that decision to the prompt library is the
application state's job. Dialogs hold only their own local state. Anything
derived from the library (the tag list being edited, for instance) is passed
in by the caller on every key so it can never go stale.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from ..models import normalize_name
from ..templates import TEMPLATE_NAMES
from . import keys
from .keys import Key


class DialogAction(Enum):
    """What a dialog asks the application to do after a key."""
    CONFIRM = "confirm"
    CANCEL = "cancel"
    SELECT = "select"
    CLEAR = "clear"
    ADD_TAG = "add_tag"
    REMOVE_TAG = "remove_tag"


@dataclass(frozen=True)
class DialogResult:
    action: DialogAction
    value: Optional[str] = None


def _clamp(value: int, size: int) -> int:
    if size <= 0:
        return 0
    return max(0, min(value, size - 1))


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------


class ConfirmAction(Enum):
    DELETE = "delete"


@dataclass
class ConfirmationDialog:
    """Yes/no question about a pending destructive action."""

    action: ConfirmAction
    target: str
    message: str = ""

    def __post_init__(self):
        if not self.message:
            self.message = f"Delete prompt '{self.target}'?"

    def handle_key(self, key: Key) -> Optional[DialogResult]:
        if key.is_char("y", "Y"):
            return DialogResult(DialogAction.CONFIRM)
        if key.is_char("n", "N") or key.name == keys.ESCAPE:
            return DialogResult(DialogAction.CANCEL)
        return None


# ---------------------------------------------------------------------------
# Tag filter
# ---------------------------------------------------------------------------


@dataclass
class TagFilterDialog:
    """Pick one tag (from those in use) to filter the list by."""

    tags: List[str]
    cursor: int = 0

    @classmethod
    def for_tags(cls, tags: List[str], active: Optional[str] = None) -> "TagFilterDialog":
        ordered = sorted(set(tags))
        cursor = ordered.index(active) if active in ordered else 0
        return cls(tags=ordered, cursor=cursor)

    @property
    def selected_tag(self) -> Optional[str]:
        if not self.tags:
            return None
        return self.tags[self.cursor]

    def move_up(self) -> None:
        self.cursor = _clamp(self.cursor - 1, len(self.tags))

    def move_down(self) -> None:
        self.cursor = _clamp(self.cursor + 1, len(self.tags))

    def handle_key(self, key: Key) -> Optional[DialogResult]:
        if key.name == keys.UP:
            self.move_up()
        elif key.name == keys.DOWN:
            self.move_down()
        elif key.name == keys.ENTER:
            tag = self.selected_tag
            if tag is None:
                return DialogResult(DialogAction.CANCEL)
            return DialogResult(DialogAction.SELECT, tag)
        elif key.is_char("c"):
            return DialogResult(DialogAction.CLEAR)
        elif key.name == keys.ESCAPE:
            return DialogResult(DialogAction.CANCEL)
        return None


# ---------------------------------------------------------------------------
# Tag edit
# ---------------------------------------------------------------------------


class TagInputMode(Enum):
    VIEW_TAGS = "view_tags"
    ADDING_TAG = "adding_tag"
    REMOVING_TAG = "removing_tag"


@dataclass
class TagEditDialog:
    """Add or remove tags on one prompt.

    The tag list itself is not stored here: callers pass the prompt's
    current tags to ``handle_key`` and the renderer reads them from the
    index, so the dialog always reflects the latest write.
    """

    prompt_name: str
    mode: TagInputMode = TagInputMode.VIEW_TAGS
    buffer: str = ""
    cursor: int = 0

    def start_adding(self) -> None:
        self.mode = TagInputMode.ADDING_TAG
        self.buffer = ""

    def start_removing(self) -> None:
        self.mode = TagInputMode.REMOVING_TAG
        self.cursor = 0

    def back_to_view(self) -> None:
        self.mode = TagInputMode.VIEW_TAGS
        self.buffer = ""
        self.cursor = 0

    def handle_key(self, key: Key, tags: List[str]) -> Optional[DialogResult]:
        if self.mode == TagInputMode.VIEW_TAGS:
            if key.is_char("a"):
                self.start_adding()
            elif key.is_char("r"):
                self.start_removing()
            elif key.name == keys.ESCAPE:
                return DialogResult(DialogAction.CANCEL)
            return None

        if self.mode == TagInputMode.ADDING_TAG:
            if key.name == keys.ESCAPE:
                self.back_to_view()
            elif key.name == keys.ENTER:
                tag = self.buffer.strip()
                self.back_to_view()
                if tag:
                    return DialogResult(DialogAction.ADD_TAG, tag)
            elif key.name == keys.BACKSPACE:
                self.buffer = self.buffer[:-1]
            elif key.printable:
                self.buffer += key.char
            return None

        # REMOVING_TAG
        if key.name == keys.ESCAPE:
            self.back_to_view()
        elif key.name == keys.UP:
            self.cursor = _clamp(self.cursor - 1, len(tags))
        elif key.name == keys.DOWN:
            self.cursor = _clamp(self.cursor + 1, len(tags))
        elif key.name == keys.ENTER:
            cursor = _clamp(self.cursor, len(tags))
            self.back_to_view()
            if tags:
                return DialogResult(DialogAction.REMOVE_TAG, tags[cursor])
        return None


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class DialogField(Enum):
    FILENAME = "filename"
    TEMPLATE = "template"


@dataclass
class CreateDialog:
    """Collects a file name and a template for a new prompt."""

    filename: str = ""
    templates: List[str] = field(default_factory=lambda: list(TEMPLATE_NAMES))
    template_index: int = 0
    current_field: DialogField = DialogField.FILENAME

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.filename)

    @property
    def selected_template(self) -> str:
        return self.templates[self.template_index]

    def is_valid(self) -> bool:
        return bool(self.normalized_name)

    def add_char(self, char: str) -> None:
        self.filename += char

    def delete_char(self) -> None:
        self.filename = self.filename[:-1]

    def next_field(self) -> None:
        fields = list(DialogField)
        self.current_field = fields[(fields.index(self.current_field) + 1) % len(fields)]

    def next_template(self) -> None:
        self.template_index = (self.template_index + 1) % len(self.templates)

    def previous_template(self) -> None:
        self.template_index = (self.template_index - 1) % len(self.templates)

    def handle_key(self, key: Key) -> Optional[DialogResult]:
        if key.name == keys.ESCAPE:
            return DialogResult(DialogAction.CANCEL)
        if key.name == keys.TAB:
            self.next_field()
            return None
        if key.name == keys.ENTER:
            if self.is_valid():
                return DialogResult(DialogAction.CONFIRM)
            return None

        if self.current_field == DialogField.TEMPLATE:
            if key.name == keys.LEFT or key.is_char("h"):
                self.previous_template()
            elif key.name == keys.RIGHT or key.is_char("l"):
                self.next_template()
            return None

        # Filename field: h and l are ordinary characters here
        if key.name == keys.BACKSPACE:
            self.delete_char()
        elif key.printable:
            self.add_char(key.char)
        return None


AnyDialog = Union[ConfirmationDialog, TagFilterDialog, TagEditDialog, CreateDialog]
