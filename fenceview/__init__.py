"""fenceview - streaming code artifacts with version navigation."""

__version__ = "0.1.0"

from .core import (
    Artifact,
    LayoutMode,
    StreamEvent,
    StreamIngestor,
    VersionIndex,
    build_version_index,
    classify,
    extract,
    scan,
)
from .session import ChatSession, Observation

__all__ = [
    "Artifact",
    "LayoutMode",
    "StreamEvent",
    "StreamIngestor",
    "VersionIndex",
    "build_version_index",
    "classify",
    "extract",
    "scan",
    "ChatSession",
    "Observation",
]
