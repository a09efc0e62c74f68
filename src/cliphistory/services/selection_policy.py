import logging
from typing import List, Optional

from cliphistory.config import DEFAULT_RECENT_LIMIT
from cliphistory.database import Store
from cliphistory.exceptions import StoreError
from cliphistory.models import ClipboardEntry

logger = logging.getLogger(__name__)


def _newest_first(entries: List[ClipboardEntry]) -> List[ClipboardEntry]:
    # entry ids break timestamp ties so repeated calls agree
    return sorted(entries, key=lambda e: (e.timestamp, e.entry_id), reverse=True)


class SelectionPolicy:
    """Read-only views over the store: the bounded recent list and favourites."""

    def __init__(self, store: Store, recent_limit: int = DEFAULT_RECENT_LIMIT) -> None:
        self.store = store
        self.recent_limit = recent_limit

    def _load(self) -> List[ClipboardEntry]:
        try:
            return self.store.list_all()
        except StoreError as e:
            logger.error(f"Failed to fetch clipboard items: {e}")
            return []

    def recent(self, limit: Optional[int] = None) -> List[ClipboardEntry]:
        if limit is None:
            limit = self.recent_limit
        if limit <= 0:
            return []
        return _newest_first(self._load())[:limit]

    def favourites(self) -> List[ClipboardEntry]:
        return _newest_first([e for e in self._load() if e.is_favourite])
