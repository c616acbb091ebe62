"""Artifact extraction from fenced code blocks.

Info string grammar (text after the opening backticks, up to the newline):

    <alphanumeric language>? ({filename=<value>})?

e.g. ``tsx{filename=Calculator.tsx}``.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .segments import Code, FENCE, code_segment, opening_info, scan

_BLOCK_RE = re.compile(r"```([^\n]*)\n(.*?)\n```", re.DOTALL)
_LANGUAGE_RE = re.compile(r"^([A-Za-z0-9]+)")
_FILENAME_RE = re.compile(r"{\s*filename\s*=\s*([^}]+)\s*}")


@dataclass(frozen=True)
class FileName:
    name: str
    extension: str = ""

    def __str__(self) -> str:
        if self.extension:
            return f"{self.name}.{self.extension}"
        return self.name


@dataclass(frozen=True)
class FenceInfo:
    language: Optional[str] = None
    filename: Optional[FileName] = None


@dataclass(frozen=True)
class Artifact:
    """The displayable unit for one assistant message or the live stream."""

    code: str
    language: Optional[str] = None
    filename: Optional[FileName] = None

    @property
    def title(self) -> str:
        return self.filename.name if self.filename else ""


def parse_filename(value: str) -> FileName:
    """Split a filename on its last dot into name and extension."""
    name, dot, extension = value.rpartition(".")
    if not dot:
        return FileName(name=value, extension="")
    return FileName(name=name, extension=extension)


def parse_info_string(info: str) -> FenceInfo:
    """Parse a fence info string. Unrecognised parts are ignored."""
    language = None
    filename = None

    lang_match = _LANGUAGE_RE.match(info)
    if lang_match:
        language = lang_match.group(1)

    file_match = _FILENAME_RE.search(info)
    if file_match:
        value = file_match.group(1).strip()
        if value:
            filename = parse_filename(value)

    return FenceInfo(language=language, filename=filename)


def extract(full_text: str) -> Optional[Artifact]:
    """Extract the first fenced block of a completed message.

    Any language tag is accepted. Returns None when the message has no
    closed fence.
    """
    match = _BLOCK_RE.search(full_text)
    if match is None:
        return None
    info = parse_info_string(match.group(1))
    return Artifact(code=match.group(2), language=info.language, filename=info.filename)


def live_artifact(buffer: str) -> Optional[Artifact]:
    """Build the artifact for an in-flight buffer.

    While the fence is open the code is whatever body has arrived so far.
    The language is the scanner's streaming hint, so layout decisions made
    before the message completes stay conservative.
    """
    segment = code_segment(scan(buffer))
    if segment is None:
        return None

    info_line = opening_info(buffer)
    filename = parse_info_string(info_line).filename if info_line is not None else None

    if isinstance(segment, Code):
        return Artifact(code=segment.content, language=segment.language, filename=filename)

    if info_line is None:
        return Artifact(code="", language=None, filename=None)
    body_start = buffer.find(FENCE) + len(FENCE) + len(info_line) + 1
    return Artifact(code=buffer[body_start:], language=segment.language, filename=filename)


def message_artifact(content: str) -> Optional[Artifact]:
    """Artifact of a stored message, as the viewer shows it.

    Falls back to the scanner's code block when the closing fence shares
    the last code line, which ``extract`` does not accept.
    """
    artifact = extract(content)
    if artifact is not None:
        return artifact
    segment = code_segment(scan(content))
    if not isinstance(segment, Code):
        return None
    info = parse_info_string(opening_info(content))
    return Artifact(code=segment.content, language=info.language, filename=info.filename)
