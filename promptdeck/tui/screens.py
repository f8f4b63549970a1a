"""Screen composition for the interactive surface.

Everything here reads ``AppState`` and produces rich renderables; nothing
mutates state. ``RichRenderer`` turns the composed screen into an ANSI
string that prompt_toolkit displays through ``ANSI()``.
"""

from io import StringIO
from typing import List, Optional

from rich.console import Console, Group, RenderableType
from rich.rule import Rule
from rich.text import Text

from ..models import PromptMetadata
from .router import InputRouter
from .state import AppMode, AppState

# Title, rule, preview and footer rows around the list
CHROME_ROWS = 4


class RichRenderer:
    """Renders rich objects to ANSI strings for prompt_toolkit."""

    def __init__(self, width: int = 80):
        self._width = width

    def set_width(self, width: int) -> None:
        self._width = width

    def render(self, renderable) -> str:
        buffer = StringIO()
        console = Console(
            file=buffer,
            width=self._width,
            force_terminal=True,
            color_system="truecolor",
        )
        console.print(renderable, end="")
        return buffer.getvalue()

    def height_of(self, renderable) -> int:
        if renderable is None:
            return 0
        return self.render(renderable).count("\n") + 1


def title_bar(state: AppState) -> Text:
    style = "bold black on cyan" if state.mode is AppMode.QUICK_SELECT else "bold black on yellow"
    title = Text(f" promptdeck · {state.mode.label} ", style=style)
    shown = len(state.index.visible)
    total = len(state.index)
    title.append(f"  {shown}/{total}", style="dim")
    if state.index.tag_filter:
        title.append("  tag: ", style="dim")
        title.append(state.index.tag_filter, style="bold magenta")
    if state.search_active:
        title.append("  /", style="bold")
        title.append(state.search_query)
        title.append("█", style="blink")
    elif state.search_query:
        title.append(f"  search: {state.search_query}", style="dim")
    return title


def prompt_row(prompt: PromptMetadata, selected: bool) -> Text:
    row = Text("› " if selected else "  ", style="bold cyan" if selected else "")
    row.append(prompt.display_name, style="bold reverse" if selected else "")
    if prompt.tags:
        row.append("  ")
        row.append(f"[{', '.join(prompt.tags)}]", style="green")
    row.no_wrap = True
    row.overflow = "ellipsis"
    return row


def scroll_window(selected: Optional[int], count: int, height: int) -> range:
    """Rows of the list to draw so the selection stays on screen."""
    if height <= 0 or count == 0:
        return range(0)
    if count <= height or selected is None:
        return range(min(count, height))
    start = min(max(0, selected - height // 2), count - height)
    return range(start, start + height)


def prompt_list(state: AppState, height: int) -> Text:
    visible = state.index.visible
    if not visible:
        if len(state.index) == 0:
            return Text("No prompts yet." + (" Press n to create one." if state.is_management else ""),
                        style="dim italic")
        return Text("No prompts match the current filter.", style="dim italic")

    selected = state.index.selected_index
    lines = Text()
    rows = scroll_window(selected, len(visible), height)
    for i in rows:
        if i != rows.start:
            lines.append("\n")
        lines.append_text(prompt_row(visible[i], i == selected))
    return lines


def preview_line(state: AppState) -> Text:
    prompt = state.selected
    if prompt is None:
        return Text("")
    path = state.application.store.absolute_path(prompt)
    return Text(str(path), style="dim", no_wrap=True, overflow="ellipsis")


def footer(state: AppState, router: InputRouter) -> Text:
    text = Text(router.active_handler().hints(state), style="dim")
    if state.status:
        text = Text.assemble((state.status, "green"), "  ", text)
    return text


def compose(state: AppState, router: InputRouter, renderer: RichRenderer, height: int) -> RenderableType:
    """Build the full screen for a terminal ``height`` rows tall."""
    overlays: List[RenderableType] = []
    for handler in router.active_handlers():
        panel = handler.render(state)
        if panel is not None:
            overlays.append(panel)
    # The banner sits below any dialog
    overlays.reverse()

    overlay_rows = sum(renderer.height_of(o) for o in overlays)
    list_height = max(1, height - CHROME_ROWS - overlay_rows)

    parts: List[RenderableType] = [
        title_bar(state),
        prompt_list(state, list_height),
        Rule(style="dim"),
        preview_line(state),
    ]
    parts.extend(overlays)
    parts.append(footer(state, router))
    return Group(*parts)


class PromptScreen:
    """Draws the whole application as one ANSI string."""

    def __init__(self, state: AppState, router: InputRouter, width: int = 80, height: int = 24):
        self.state = state
        self.router = router
        self.renderer = RichRenderer(width)
        self.height = height

    def resize(self, width: int, height: int) -> None:
        self.renderer.set_width(width)
        self.height = height

    def render(self) -> str:
        return self.renderer.render(compose(self.state, self.router, self.renderer, self.height))
