"""
cliphistory - deduplicated clipboard history with favourites.

The engine polls the system clipboard, stores each distinct text once and
keeps favourites visible no matter how long the history grows.
"""

from cliphistory.models import ClipboardEntry
from cliphistory.services import ActionDispatcher, HistoryEngine, SelectionPolicy

__version__ = "0.1.0"

__all__ = [
    'ActionDispatcher',
    'ClipboardEntry',
    'HistoryEngine',
    'SelectionPolicy',
]
