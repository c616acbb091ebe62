"""Terminal rendering for chat observations."""

from .theme import PALETTE, console
from .code_block import render_code_container
from .viewer import (
    render_error,
    render_observation,
    render_stream_event,
    render_version_footer,
    render_version_list,
)

__all__ = [
    "PALETTE",
    "console",
    "render_code_container",
    "render_error",
    "render_observation",
    "render_stream_event",
    "render_version_footer",
    "render_version_list",
]
