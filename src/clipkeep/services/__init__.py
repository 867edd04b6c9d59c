"""Service layer for clipkeep."""

from .clipboard_service import ClipboardService
from .history_service import HISTORY_KEY, HistoryStore

__all__ = ["ClipboardService", "HistoryStore", "HISTORY_KEY"]
