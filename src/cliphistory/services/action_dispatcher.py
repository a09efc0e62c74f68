import logging

from cliphistory.database import Store
from cliphistory.exceptions import EntryNotFound, StoreError
from cliphistory.models import (
    Action,
    CopyAction,
    RemoveFavouriteAction,
    SourceList,
    ToggleFavouriteAction,
    action_for,
)
from cliphistory.services.history_engine import HistoryEngine

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Applies menu selections to the history through the engine.

    Stale ids are recoverable misses: they are logged and the call returns
    ``False`` instead of raising.
    """

    def __init__(self, store: Store, engine: HistoryEngine) -> None:
        self.store = store
        self.engine = engine

    def select(self, entry_id: str, modifier_pressed: bool, source_list: SourceList) -> bool:
        return self.dispatch(action_for(entry_id, modifier_pressed, source_list))

    def dispatch(self, action: Action) -> bool:
        """Apply ``action``; returns ``True`` when it changed something."""
        try:
            if isinstance(action, CopyAction):
                return self._copy(action.entry_id)
            elif isinstance(action, ToggleFavouriteAction):
                return self.engine.toggle_favourite(action.entry_id) is not None
            elif isinstance(action, RemoveFavouriteAction):
                return self.engine.remove_favourite(action.entry_id) is not None
        except EntryNotFound as e:
            logger.warning(f"Ignoring {type(action).__name__}: {e}")
            return False

        raise TypeError(f"Unsupported action: {action!r}")

    def _copy(self, entry_id: str) -> bool:
        try:
            entry = self.store.get(entry_id)
        except StoreError as e:
            logger.error(f"Failed to load entry {entry_id}: {e}")
            return False

        if entry is None:
            raise EntryNotFound(entry_id)

        if not self.engine.write_to_clipboard(entry.content):
            return False
        self.engine.move_to_top(entry.entry_id)
        return True
