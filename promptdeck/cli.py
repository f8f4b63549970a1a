"""Command-line entry point for promptdeck.

With no command the interactive browser starts in Quick Select mode; the
other commands operate on the prompt library directly and are safe to use
from scripts.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.text import Text

from .application import PromptApplication
from .clipboard import create_provider
from .config import ConfigValidationError, PromptDeckConfig, load_config
from .editor import EditorLauncher
from .errors import PromptDeckError
from .models import PromptMetadata, PromptType, SearchType
from .store import PromptStore
from .templates import TEMPLATE_NAMES

logger = logging.getLogger(__name__)

INTERACTIVE_COMMANDS = ("tui", "manage")
PROMPT_TYPE_NAMES = [t.value for t in PromptType]


def _stdout() -> Console:
    return Console(highlight=False, soft_wrap=True)


def _stderr() -> Console:
    return Console(stderr=True, highlight=False, soft_wrap=True)


def configure_logging(interactive: bool, verbose: bool = False) -> None:
    """Route log records somewhere that can't corrupt the screen.

    The full-screen UI logs to ``$PROMPTDECK_TRACE_LOG`` when set and
    nowhere otherwise. Plain commands log warnings (or everything with
    ``-v``) to stderr.
    """
    root_logger = logging.getLogger()
    if interactive:
        trace_log_path = os.environ.get("PROMPTDECK_TRACE_LOG")
        if trace_log_path:
            os.makedirs(os.path.dirname(os.path.abspath(trace_log_path)), exist_ok=True)
            file_handler = logging.FileHandler(trace_log_path)
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            ))
            root_logger.handlers = [file_handler]
            root_logger.setLevel(logging.DEBUG)
        else:
            root_logger.handlers = [logging.NullHandler()]
            root_logger.setLevel(logging.CRITICAL + 1)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def format_tags(tags: List[str]) -> str:
    return f"[{', '.join(tags)}]"


def _prompt_line(prompt: PromptMetadata) -> Text:
    line = Text(prompt.display_name, style="bold")
    if prompt.tags:
        line.append("  ")
        line.append(format_tags(prompt.tags), style="green")
    if prompt.prompt_type is not None:
        line.append(f"  ({prompt.prompt_type.value})", style="dim")
    return line


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_list(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    prompt_type = PromptType(args.type) if args.type else None
    prompts = app.list_prompts(tag=args.tag, prompt_type=prompt_type)
    console = _stdout()
    if not prompts:
        if args.tag:
            console.print(Text(f"No prompts found with tag '{args.tag}'"))
        elif prompt_type is not None:
            console.print(Text(f"No prompts found of type '{prompt_type.value}'"))
        else:
            console.print(Text("No prompts found"))
        return 0
    for prompt in prompts:
        console.print(_prompt_line(prompt))
    return 0


def cmd_get(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    _, body = app.get_prompt(args.name)
    sys.stdout.write(body)
    if body and not body.endswith("\n"):
        sys.stdout.write("\n")
    return 0


def cmd_create(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    content = args.content
    if args.stdin:
        content = sys.stdin.read()
    elif args.clipboard:
        content = app.read_clipboard(create_provider(config.clipboard))
    prompt_type = PromptType(args.type) if args.type else None
    created = app.create_prompt(args.name, template=args.template, content=content, prompt_type=prompt_type)
    path = app.store.absolute_path(created)
    _stdout().print(Text(f"Created prompt: {path}", style="green"))
    return 0


def cmd_edit(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    app.edit_prompt(args.name, EditorLauncher(config.editor))
    _stdout().print(Text(f"Edited prompt: {args.name}"))
    return 0


def cmd_delete(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    app.delete_prompt(args.name, force=args.force)
    _stdout().print(Text(f"Deleted prompt: {args.name}"))
    return 0


def cmd_copy(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    app.copy_prompt(args.name, create_provider(config.clipboard))
    _stdout().print(Text("Copied to clipboard", style="green"))
    return 0


def cmd_search(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    results = app.search_prompts(args.query, SearchType(args.type))
    console = _stdout()
    if not results:
        console.print(Text(f"No prompts found matching '{args.query}'"))
        return 0
    for prompt in results:
        console.print(_prompt_line(prompt))
    return 0


def cmd_tag(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    updated = app.find_prompt(args.name)
    for tag in args.add or []:
        updated = app.add_tag(args.name, tag)
    for tag in args.remove or []:
        updated = app.remove_tag(args.name, tag)
    _stdout().print(Text.assemble(
        (updated.display_name, "bold"), "  ", (format_tags(updated.tags), "green"),
    ))
    return 0


def cmd_rename(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    renamed = app.rename_prompt(args.name, args.new_name)
    _stdout().print(Text(f"Renamed {args.name} to {renamed.name}"))
    return 0


def cmd_tags(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    tags = app.tags()
    console = _stdout()
    if not tags:
        console.print(Text("No tags found"))
        return 0
    for tag, count in tags:
        console.print(Text.assemble((tag, "green"), f" ({count})"))
    return 0


def cmd_tui(app: PromptApplication, config: PromptDeckConfig, args) -> int:
    from .tui import AppMode, run_tui

    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        _stderr().print(Text(
            "Error: the interactive browser requires a terminal.\n"
            "Use 'promptdeck list' or 'promptdeck get' in scripts.",
            style="red",
        ))
        return 1

    if args.command == "manage":
        mode = AppMode.MANAGEMENT
    else:
        mode = AppMode(config.default_mode)

    app.store.ensure_dir()
    run_tui(app, create_provider(config.clipboard), EditorLauncher(config.editor), mode)
    return 0


COMMANDS = {
    "list": cmd_list,
    "get": cmd_get,
    "create": cmd_create,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "copy": cmd_copy,
    "search": cmd_search,
    "tag": cmd_tag,
    "rename": cmd_rename,
    "tags": cmd_tags,
    "tui": cmd_tui,
    "manage": cmd_tui,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promptdeck",
        description="Manage a library of reusable prompts stored as markdown files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
With no command, the interactive browser starts in Quick Select mode:
pick a prompt, press Enter, and its body is on your clipboard.

Environment:
  PROMPTDECK_PATH            Base directory holding prompts/ (default ~/.promptdeck)
  PROMPTDECK_EDITOR          Editor command (else $EDITOR, $VISUAL, vi)
  PROMPTDECK_COPY_MECHANISM  auto | native | osc52
  PROMPTDECK_TRACE_LOG       Log file for the interactive browser
        """,
    )
    parser.add_argument(
        "--path",
        help="Base directory holding prompts/ (overrides config and PROMPTDECK_PATH)"
    )
    parser.add_argument(
        "--config",
        help="Path to config.json (default: .promptdeck/config.json, then ~/.promptdeck/config.json)"
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr"
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("list", help="List prompts")
    p.add_argument("--tag", help="Only prompts carrying this tag")
    p.add_argument("--type", choices=PROMPT_TYPE_NAMES, help="Only prompts of this type")

    p = sub.add_parser("get", help="Print a prompt's body")
    p.add_argument("name")

    p = sub.add_parser("create", help="Create a prompt from a template")
    p.add_argument("name")
    p.add_argument(
        "--template", "-t",
        choices=TEMPLATE_NAMES,
        default="default",
        help="Body template (default: default)"
    )
    content = p.add_mutually_exclusive_group()
    content.add_argument("--content", "-c", help="Body text appended after the template")
    content.add_argument("--stdin", action="store_true", help="Read body text from stdin")
    content.add_argument(
        "--clipboard", action="store_true",
        help="Use the clipboard contents as body text (needs a native clipboard tool)"
    )
    p.add_argument("--type", choices=PROMPT_TYPE_NAMES, help="Prompt type written to the header")

    p = sub.add_parser("edit", help="Open a prompt in your editor")
    p.add_argument("name")

    p = sub.add_parser("delete", help="Delete a prompt")
    p.add_argument("name")
    p.add_argument("--force", "-f", action="store_true", help="Delete without confirmation")

    p = sub.add_parser("copy", help="Copy a prompt's body to the clipboard")
    p.add_argument("name")

    p = sub.add_parser(
        "search",
        help="Search prompts",
        description="Search prompts by name, tag and content. "
                    "(The interactive browser's '/' search matches names only.)",
    )
    p.add_argument("query")
    p.add_argument(
        "--type",
        choices=[t.value for t in SearchType],
        default=SearchType.ALL.value,
        help="What to match against (default: all)"
    )

    p = sub.add_parser("tag", help="Add or remove tags on a prompt")
    p.add_argument("name")
    p.add_argument("--add", "-a", action="append", metavar="TAG", help="Tag to add (repeatable)")
    p.add_argument("--remove", "-r", action="append", metavar="TAG", help="Tag to remove (repeatable)")

    p = sub.add_parser("rename", help="Rename a prompt")
    p.add_argument("name")
    p.add_argument("new_name")

    sub.add_parser("tags", help="List tags with usage counts")
    sub.add_parser("tui", help="Interactive browser in Quick Select mode (default)")
    sub.add_parser("manage", help="Interactive browser in Management mode")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "tui"
    if args.command == "tag" and not (args.add or args.remove):
        parser.error("tag: give at least one --add or --remove")

    load_dotenv(args.env_file)
    configure_logging(args.command in INTERACTIVE_COMMANDS, args.verbose)

    try:
        config = load_config(args.config).with_storage_path(args.path)
    except (ConfigValidationError, FileNotFoundError) as e:
        _stderr().print(Text(f"Error: {e}", style="red"))
        return 1

    app = PromptApplication(PromptStore(config.storage_path))
    logger.debug(f"Prompt library at {app.store.prompts_dir}")

    try:
        return COMMANDS[args.command](app, config, args)
    except PromptDeckError as e:
        _stderr().print(Text(f"Error: {e.user_message()}", style="red"))
        return 1
