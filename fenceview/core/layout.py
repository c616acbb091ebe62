"""Presentation mode for an artifact's language."""

from enum import Enum
from typing import Iterable, Optional


class LayoutMode(str, Enum):
    TWO_UP = "two-up"
    TABBED = "tabbed"


# Script-first languages shown code and output side by side.
TWO_UP_LANGUAGES = frozenset({"python", "ts", "js", "javascript", "typescript"})


def classify(
    language: Optional[str],
    two_up_languages: Iterable[str] = TWO_UP_LANGUAGES,
) -> LayoutMode:
    """Map a language tag to a layout. Unknown or missing tags are tabbed."""
    if language and language in frozenset(two_up_languages):
        return LayoutMode.TWO_UP
    return LayoutMode.TABBED
