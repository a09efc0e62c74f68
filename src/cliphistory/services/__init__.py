"""Service layer for cliphistory."""

from .history_engine import HistoryEngine
from .selection_policy import SelectionPolicy
from .action_dispatcher import ActionDispatcher

__all__ = ["ActionDispatcher", "HistoryEngine", "SelectionPolicy"]
