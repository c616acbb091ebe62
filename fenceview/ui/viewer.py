"""Render a session Observation to the terminal.

Prose segments go through rich Markdown, the artifact through the
bordered code container, and the footer shows the version position with
previous/next affordances.
"""

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

from ..core.extractor import Artifact, message_artifact
from ..core.ingest import StreamEvent
from ..core.layout import TWO_UP_LANGUAGES, LayoutMode, classify
from ..core.segments import Code, Prose
from ..session import Observation
from .code_block import render_code_container
from .theme import PALETTE

_PREV = "<"
_NEXT = ">"

_LAYOUT_LABELS = {
    LayoutMode.TWO_UP: "code | output",
    LayoutMode.TABBED: "code / preview tabs",
}


def render_version_footer(observation: Observation, console: Console) -> None:
    """Print '< Version N of M >' with disabled arrows dimmed."""
    version = observation.version
    footer = Text()
    footer.append(
        f"{_PREV} ",
        style=PALETTE.text_bright if observation.can_go_previous else f"dim {PALETTE.text_muted}",
    )
    footer.append(f"Version {version.current + 1}", style=PALETTE.text_bright)
    footer.append(" of ", style=PALETTE.text_dim)
    footer.append(str(version.total), style=PALETTE.text_bright)
    footer.append(
        f" {_NEXT}",
        style=PALETTE.text_bright if observation.can_go_next else f"dim {PALETTE.text_muted}",
    )
    footer.append(f"   [{_LAYOUT_LABELS[observation.layout]}]", style=f"dim {PALETTE.text_dim}")
    if observation.is_live:
        footer.append("  live", style=f"bold {PALETTE.live}")
    console.print(footer)


def render_observation(observation: Observation, console: Console) -> None:
    """Draw the prose, the artifact and the version footer."""
    for segment in observation.segments:
        if isinstance(segment, Prose):
            if segment.text.strip():
                console.print(Markdown(segment.text))
        elif observation.artifact is not None:
            status = "generating" if observation.generating else None
            render_code_container(observation.artifact, console, status=status)
        elif isinstance(segment, Code):
            render_code_container(Artifact(code=segment.content, language=segment.language), console)

    if observation.stream_error:
        render_error(f"stream interrupted: {observation.stream_error}", console)
    render_version_footer(observation, console)


def render_stream_event(event: StreamEvent, console: Console) -> None:
    """One-line notice for stream transitions."""
    line = Text()
    if event is StreamEvent.ENTERED_CODE:
        line.append("... ", style=f"dim {PALETTE.live}")
        line.append("writing code", style=f"dim {PALETTE.text}")
    else:
        line.append("ok  ", style=f"bold {PALETTE.done}")
        line.append("code complete", style=f"dim {PALETTE.text}")
    console.print(line)


def render_error(text: str, console: Console) -> None:
    """Render an error message."""
    err = Text()
    err.append("err ", style=f"bold {PALETTE.error}")
    err.append("| ", style=f"dim {PALETTE.text_muted}")
    err.append(text, style=PALETTE.error)
    console.print(err)


def render_version_list(
    messages,
    console: Console,
    current: int = -1,
    two_up_languages=None,
) -> None:
    """List every stored version with its artifact title and layout."""
    languages = two_up_languages or TWO_UP_LANGUAGES
    for i, message in enumerate(messages):
        artifact = message_artifact(message.content)
        row = Text()
        marker = "*" if i == current else " "
        row.append(f"{marker} v{i + 1:<3} ", style=PALETTE.accent if i == current else PALETTE.text)
        if artifact is None:
            row.append("(no code)", style=f"dim {PALETTE.text_dim}")
        else:
            title = str(artifact.filename) if artifact.filename else "untitled"
            row.append(title, style=PALETTE.text_bright)
            row.append(f"  {artifact.language or 'text'}", style=PALETTE.text_dim)
            layout = classify(artifact.language, languages)
            row.append(f"  {layout.value}", style=f"dim {PALETTE.text_dim}")
        row.append(f"  {message.created_at[:16]}", style=f"dim {PALETTE.text_muted}")
        console.print(row)
