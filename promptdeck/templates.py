"""Templates for newly created prompts."""

from typing import Dict, List, Optional

from .errors import InvalidInputError
from .frontmatter import serialize
from .models import PromptType

# Ordered as presented in the create dialog; "none" must stay first
TEMPLATE_NAMES: List[str] = ["none", "default", "basic"]

_BASIC_BODY = """# Instruction

# Context

# Input Data

# Output Indicator
"""


def _template_body(display_name: str, template: str) -> str:
    bodies: Dict[str, str] = {
        "none": "",
        "default": f"# {display_name}\n\n",
        "basic": _BASIC_BODY,
    }
    if template not in bodies:
        raise InvalidInputError(
            "template",
            f"Unknown template: {template}. Available: {', '.join(TEMPLATE_NAMES)}",
        )
    return bodies[template]


def generate(
    display_name: str,
    template: Optional[str] = None,
    content: Optional[str] = None,
    tags: Optional[List[str]] = None,
    prompt_type: Optional[PromptType] = None,
) -> str:
    """Generate the full text of a new prompt file.

    Args:
        display_name: Name written to the header.
        template: One of ``TEMPLATE_NAMES``; None means "none".
        content: Optional body text placed after the template body.
        tags: Initial tags.
        prompt_type: Written to the header as ``type`` when given.

    Raises:
        InvalidInputError: If the template is unknown.
    """
    body = _template_body(display_name, (template or "none").lower())
    if content:
        if body and not body.endswith("\n\n"):
            body += "\n"
        body += content if content.endswith("\n") else content + "\n"
    header = {"name": display_name, "tags": tags or []}
    if prompt_type is not None:
        header["type"] = prompt_type.value
    return serialize(header, body)
