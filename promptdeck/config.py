"""Configuration loading for promptdeck.

Settings come from a JSON file, first found wins:

1. Explicit path (``--config``)
2. ``$PROMPTDECK_CONFIG``
3. ``.promptdeck/config.json`` (project-level)
4. ``~/.promptdeck/config.json`` (user-level)

Environment variables override file values:

    PROMPTDECK_PATH            Base directory holding ``prompts/``
    PROMPTDECK_EDITOR          Editor command
    PROMPTDECK_COPY_MECHANISM  auto | native | osc52
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .clipboard import ClipboardConfig, ClipboardMechanism
from .constants import DEFAULT_STORAGE_PATH

logger = logging.getLogger(__name__)

VALID_MODES = ("quick_select", "management")


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")


@dataclass
class PromptDeckConfig:
    """Resolved configuration."""

    storage_path: Path = field(default_factory=lambda: DEFAULT_STORAGE_PATH)
    editor: Optional[str] = None
    default_mode: str = "quick_select"
    clipboard: ClipboardConfig = field(default_factory=ClipboardConfig)
    source: Optional[str] = None  # file the config was loaded from

    def with_storage_path(self, path: Optional[str]) -> "PromptDeckConfig":
        """Return self with ``storage_path`` overridden when ``path`` is given."""
        if path:
            self.storage_path = Path(path).expanduser()
        return self


def validate_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Validate a raw configuration dict.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors: List[str] = []

    storage_path = config.get("storage_path")
    if storage_path is not None and (not isinstance(storage_path, str) or not storage_path):
        errors.append("'storage_path' must be a non-empty string")

    editor = config.get("editor")
    if editor is not None and (not isinstance(editor, str) or not editor.strip()):
        errors.append("'editor' must be a non-empty string")

    mode = config.get("default_mode")
    if mode is not None and mode not in VALID_MODES:
        errors.append(f"Invalid default_mode: {mode} (expected one of {', '.join(VALID_MODES)})")

    mechanism = config.get("clipboard")
    if mechanism is not None:
        valid = [m.value for m in ClipboardMechanism]
        if mechanism not in valid:
            errors.append(f"Invalid clipboard mechanism: {mechanism} (expected one of {', '.join(valid)})")

    unknown = set(config) - {"storage_path", "editor", "default_mode", "clipboard"}
    for key in sorted(unknown):
        logger.warning(f"Unknown config key '{key}' - ignoring")

    return len(errors) == 0, errors


def _find_config_file(path: Optional[str]) -> Optional[Path]:
    if path:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return config_path

    env_path = os.environ.get("PROMPTDECK_CONFIG")
    if env_path:
        config_path = Path(env_path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {env_path}")
        return config_path

    for candidate in (
        Path.cwd() / ".promptdeck" / "config.json",
        Path.home() / ".promptdeck" / "config.json",
    ):
        if candidate.exists():
            return candidate
    return None


def load_config(path: Optional[str] = None) -> PromptDeckConfig:
    """Load, validate and resolve configuration.

    Raises:
        FileNotFoundError: If an explicitly named config file doesn't exist.
        ConfigValidationError: If validation fails or the file isn't valid JSON.
    """
    raw: Dict[str, Any] = {}
    config_path = _find_config_file(path)
    if config_path is not None:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError([f"Invalid JSON in {config_path}: {e}"]) from e
        if not isinstance(raw, dict):
            raise ConfigValidationError([f"{config_path} must contain a JSON object"])
        logger.info(f"Loaded config from {config_path}")

    env_overrides = {
        "storage_path": os.environ.get("PROMPTDECK_PATH"),
        "editor": os.environ.get("PROMPTDECK_EDITOR"),
        "clipboard": os.environ.get("PROMPTDECK_COPY_MECHANISM"),
    }
    for key, value in env_overrides.items():
        if value:
            raw[key] = value.lower() if key == "clipboard" else value

    is_valid, errors = validate_config(raw)
    if not is_valid:
        raise ConfigValidationError(errors)

    clipboard = ClipboardConfig()
    if raw.get("clipboard"):
        clipboard = ClipboardConfig(mechanism=ClipboardMechanism(raw["clipboard"]))

    return PromptDeckConfig(
        storage_path=Path(raw.get("storage_path") or DEFAULT_STORAGE_PATH).expanduser(),
        editor=raw.get("editor"),
        default_mode=raw.get("default_mode", "quick_select"),
        clipboard=clipboard,
        source=str(config_path) if config_path else None,
    )
