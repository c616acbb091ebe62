"""Default system prompt for artifact conversations."""

from typing import Optional

DEFAULT_SYSTEM_PROMPT = """\
You are an expert engineer who answers every request with a single, complete
code artifact.

Rules:
- Reply with a short explanation followed by exactly one fenced code block.
- Tag the opening fence with the language and the file name, for example
  ```tsx{filename=Calculator.tsx}
- Always return the whole file, never a partial diff.
- Do not put a second code block in the same reply."""

FIX_REQUEST_PREFIX = "The code is not working. Can you fix it? Here's the error:\n\n"


def build_system_prompt(override: Optional[str] = None) -> str:
    """Return the configured system prompt, falling back to the default."""
    return override or DEFAULT_SYSTEM_PROMPT


def build_fix_request(error: str) -> str:
    """User message asking the assistant to fix the current artifact."""
    return FIX_REQUEST_PREFIX + error.lstrip()
