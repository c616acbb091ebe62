"""Bordered artifact container with syntax highlighting."""

from typing import Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from ..core.extractor import Artifact
from .theme import PALETTE, SYNTAX_THEME

_TOP_LEFT = "╭"
_TOP_RIGHT = "╮"
_BOT_LEFT = "╰"
_BOT_RIGHT = "╯"
_VERT = "│"
_HORIZ = "─"


def _header_label(artifact: Artifact) -> str:
    parts = []
    if artifact.filename is not None:
        parts.append(str(artifact.filename))
    parts.append(artifact.language or "text")
    return " . ".join(parts)


def render_code_container(
    artifact: Artifact,
    console: Console,
    status: Optional[str] = None,
) -> None:
    """Render an artifact in a bordered, line-numbered block.

    Args:
        artifact: The artifact to draw.
        console: Rich Console to print to.
        status: Optional trailing label for the top border (e.g. "generating").
    """
    term_width = console.width or 80
    inner_width = term_width - 4  # border + padding

    label = _header_label(artifact)
    if status:
        label = f"{label} . {status}"

    top = Text()
    top.append(_TOP_LEFT, style=f"dim {PALETTE.border}")
    top.append(f" {label} ", style=f"dim {PALETTE.text_dim}")
    top.append(_HORIZ * max(inner_width - len(label) - 2, 1), style=f"dim {PALETTE.border}")
    top.append(_TOP_RIGHT, style=f"dim {PALETTE.border}")
    console.print(top)

    syntax = Syntax("", artifact.language or "text", theme=SYNTAX_THEME)
    lines = artifact.code.rstrip("\n").split("\n")
    for i, line in enumerate(lines):
        row = Text()
        row.append(f"{_VERT} ", style=f"dim {PALETTE.border}")
        row.append(f"{i + 1:>3} ", style=PALETTE.text_muted)
        highlighted = syntax.highlight(line)
        highlighted.rstrip()
        row.append_text(highlighted)
        console.print(row, overflow="ellipsis", no_wrap=True)

    bot = Text()
    bot.append(_BOT_LEFT, style=f"dim {PALETTE.border}")
    bot.append(_HORIZ * (inner_width + 1), style=f"dim {PALETTE.border}")
    bot.append(_BOT_RIGHT, style=f"dim {PALETTE.border}")
    console.print(bot)
