"""Content processing utilities for generated website code."""

import re

# Opening fence: three backticks, an optional letters-only language tag,
# and an optional newline ("```html\n", "```\n", "```JS").
_OPENING_FENCE = re.compile(r"```[a-z]*\n?", re.IGNORECASE)
_BARE_FENCE = "```"


def sanitize_generated_code(text: str) -> str:
    """
    Strip markdown code fences and surrounding whitespace from model output.

    Every fence is removed wherever it occurs, not only at the ends, and the
    result is trimmed. Idempotent: ``sanitize(sanitize(x)) == sanitize(x)``,
    and fence-free text comes back only trimmed.

    Args:
        text: Raw text returned by the generation client

    Returns:
        Code ready to store in a Version
    """
    if not text:
        return ""
    cleaned = _OPENING_FENCE.sub("", text)
    cleaned = cleaned.replace(_BARE_FENCE, "")
    return cleaned.strip()


PROJECT_NAME_LENGTH = 50
"""Projects are named after the start of their initial prompt."""


def derive_project_name(prompt: str) -> str:
    """First line of the prompt, collapsed and cut to PROJECT_NAME_LENGTH."""
    first_line = " ".join(prompt.strip().splitlines()[0].split()) if prompt.strip() else ""
    if len(first_line) <= PROJECT_NAME_LENGTH:
        return first_line
    return first_line[:PROJECT_NAME_LENGTH].rstrip() + "..."
