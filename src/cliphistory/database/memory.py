import threading
from typing import Dict, List, Optional

from cliphistory.database.base import Store
from cliphistory.exceptions import DuplicateContentError
from cliphistory.models import ClipboardEntry


class InMemoryStore(Store):

    def __init__(self):
        self._lock = threading.RLock()
        self._entries: Dict[str, ClipboardEntry] = {}
        self._by_content: Dict[str, str] = {}

    def find_by_content(self, content: str) -> Optional[ClipboardEntry]:
        with self._lock:
            entry_id = self._by_content.get(content)
            return self._entries.get(entry_id) if entry_id else None

    def get(self, entry_id: str) -> Optional[ClipboardEntry]:
        with self._lock:
            return self._entries.get(entry_id)

    def upsert(self, entry: ClipboardEntry) -> ClipboardEntry:
        with self._lock:
            owner = self._by_content.get(entry.content)
            if owner is not None and owner != entry.entry_id:
                raise DuplicateContentError(
                    f"Content already stored under {owner}")

            previous = self._entries.get(entry.entry_id)
            if previous is not None and previous.content != entry.content:
                raise ValueError(
                    f"Entry {entry.entry_id} content is immutable")

            self._entries[entry.entry_id] = entry
            self._by_content[entry.content] = entry.entry_id
            return entry

    def list_all(self) -> List[ClipboardEntry]:
        with self._lock:
            return list(self._entries.values())

    def count(self) -> int:
        with self._lock:
            return len(self._entries)
