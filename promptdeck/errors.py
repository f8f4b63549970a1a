"""Exception hierarchy for promptdeck.

Every failure surfaced to the user derives from ``PromptDeckError``. The
``recoverable`` flag tells the interactive surface whether an error can be
shown in the error banner (the user acknowledges it and carries on) or must
tear the terminal down and exit.
"""

from typing import Optional


class PromptDeckError(Exception):
    """Base class for all promptdeck errors."""

    recoverable = False

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def user_message(self) -> str:
        """Message plus remediation hint, for command-line output."""
        if self.hint:
            return f"{self.message}\n{self.hint}"
        return self.message


class PromptNotFoundError(PromptDeckError):
    """Raised when a named prompt does not exist."""

    recoverable = True

    def __init__(self, name: str):
        super().__init__(
            f"Prompt not found: {name}",
            hint=(
                "Try:\n"
                "  - Check the prompt name\n"
                "  - Run 'promptdeck list' to see available prompts\n"
                f"  - Create it with 'promptdeck create {name}'"
            ),
        )
        self.name = name


class PromptAlreadyExistsError(PromptDeckError):
    """Raised when creating a prompt whose file is already present."""

    recoverable = True

    def __init__(self, name: str):
        super().__init__(
            f"Prompt already exists: {name}",
            hint=(
                "Try:\n"
                "  - Use a different name\n"
                f"  - Edit the existing prompt with 'promptdeck edit {name}'"
            ),
        )
        self.name = name


class InvalidFormatError(PromptDeckError):
    """Raised when a prompt file header cannot be parsed."""

    recoverable = True

    def __init__(self, detail: str):
        super().__init__(f"Invalid prompt format: {detail}")


class StorageIOError(PromptDeckError):
    """Raised when the filesystem fails underneath the store."""

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        hint = None
        if isinstance(cause, PermissionError):
            hint = "Permission denied. Check file permissions or run with appropriate privileges."
        super().__init__(f"IO error: {detail}", hint=hint)
        self.cause = cause


class InvalidPathError(PromptDeckError):
    """Raised when a path would escape the prompts directory."""

    recoverable = True

    def __init__(self, path: str):
        super().__init__(f"Invalid path: {path}")
        self.path = path


class ClipboardError(PromptDeckError):
    """Raised when the clipboard rejects a copy."""

    recoverable = True

    def __init__(self, detail: str):
        super().__init__(f"Clipboard error: {detail}")


class EditorError(PromptDeckError):
    """Raised when the external editor cannot be started or exits non-zero."""

    def __init__(self, detail: str):
        super().__init__(f"Editor error: {detail}")


class InvalidInputError(PromptDeckError):
    """Raised when user input fails validation."""

    recoverable = True

    def __init__(self, field_name: str, detail: str):
        super().__init__(f"Invalid input for '{field_name}': {detail}")
        self.field_name = field_name
        self.detail = detail


class MissingRequiredError(PromptDeckError):
    """Raised when a required dialog field is empty."""

    recoverable = True

    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: {field_name}")
        self.field_name = field_name
