"""Chat persistence."""

from .database import HistoryDB

__all__ = ["HistoryDB"]
