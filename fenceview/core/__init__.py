"""Streaming fence extraction and version navigation."""

from .segments import (
    Code,
    CodeOpenIncomplete,
    Prose,
    ScanState,
    Segment,
    code_segment,
    scan,
    scan_state,
)
from .extractor import (
    Artifact,
    FenceInfo,
    FileName,
    extract,
    live_artifact,
    message_artifact,
    parse_info_string,
)
from .layout import LayoutMode, classify
from .versions import VersionCursor, VersionIndex, build_version_index
from .ingest import StreamEvent, StreamIngestor, ingest

__all__ = [
    "Code",
    "CodeOpenIncomplete",
    "Prose",
    "ScanState",
    "Segment",
    "code_segment",
    "scan",
    "scan_state",
    "Artifact",
    "FenceInfo",
    "FileName",
    "extract",
    "live_artifact",
    "message_artifact",
    "parse_info_string",
    "LayoutMode",
    "classify",
    "VersionCursor",
    "VersionIndex",
    "build_version_index",
    "StreamEvent",
    "StreamIngestor",
    "ingest",
]
