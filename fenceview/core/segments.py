"""Fence scanner: classify a possibly partial buffer into prose and code.

The scanner is a pure function over the whole cumulative buffer. It is
re-run on every streamed chunk, so it only ever looks at the first fence
and keeps no state between calls.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

FENCE = "```"

# Tags that produce a language hint while streaming. Any other tag still
# opens a fence, it just carries no language.
STREAM_LANGUAGES = frozenset({"typescript", "tsx", "javascript", "jsx"})

_FENCE_RE = re.compile(r"```([^\n]*)\n(.*?)```", re.DOTALL)
_TAG_RE = re.compile(r"^([A-Za-z0-9]+)")


@dataclass(frozen=True)
class Prose:
    text: str


@dataclass(frozen=True)
class CodeOpenIncomplete:
    """A fence was opened but has not been closed yet."""

    language: Optional[str] = None


@dataclass(frozen=True)
class Code:
    content: str
    language: Optional[str] = None


Segment = Union[Prose, CodeOpenIncomplete, Code]


class ScanState(Enum):
    PROSE = auto()
    GENERATING = auto()
    COMPLETE = auto()


def _stream_language(info: str) -> Optional[str]:
    match = _TAG_RE.match(info)
    if match and match.group(1) in STREAM_LANGUAGES:
        return match.group(1)
    return None


def opening_info(buffer: str) -> Optional[str]:
    """Return the info line of the first fence once its newline has arrived."""
    start = buffer.find(FENCE)
    if start == -1:
        return None
    line_end = buffer.find("\n", start + len(FENCE))
    if line_end == -1:
        return None
    return buffer[start + len(FENCE):line_end]


def scan(buffer: str) -> list[Segment]:
    """Split ``buffer`` into prose and the first fenced code block.

    Returns ``[Prose]`` when no fence delimiter is present,
    ``[Prose, CodeOpenIncomplete]`` while the first fence is still open and
    ``[Prose?, Code, Prose?]`` once it is closed. Later fences stay in the
    trailing prose.
    """
    match = _FENCE_RE.search(buffer)
    if match is None:
        start = buffer.find(FENCE)
        if start == -1:
            return [Prose(buffer)]
        info = opening_info(buffer)
        language = _stream_language(info) if info is not None else None
        return [Prose(buffer[:start]), CodeOpenIncomplete(language)]

    body = match.group(2)
    if body.endswith("\n"):
        body = body[:-1]

    segments: list[Segment] = []
    before = buffer[:match.start()]
    after = buffer[match.end():]
    if before:
        segments.append(Prose(before))
    segments.append(Code(body, _stream_language(match.group(1))))
    if after:
        segments.append(Prose(after))
    return segments


def code_segment(segments: list[Segment]) -> Optional[Union[Code, CodeOpenIncomplete]]:
    """Return the code or still-open code segment, if any."""
    for segment in segments:
        if isinstance(segment, (Code, CodeOpenIncomplete)):
            return segment
    return None


def scan_state(segments: list[Segment]) -> ScanState:
    segment = code_segment(segments)
    if segment is None:
        return ScanState.PROSE
    if isinstance(segment, CodeOpenIncomplete):
        return ScanState.GENERATING
    return ScanState.COMPLETE
