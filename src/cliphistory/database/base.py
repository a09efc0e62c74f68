from abc import ABC, abstractmethod
from typing import List, Optional

from cliphistory.models import ClipboardEntry


class Store(ABC):
    """Keyed storage for clipboard entries.

    Implementations own every entry exclusively and must keep at most one entry
    per distinct content; an upsert that would break that raises
    ``DuplicateContentError``. Transient failures surface as ``StoreError``.
    Sorting and filtering are left to the caller.
    """

    @abstractmethod
    def find_by_content(self, content: str) -> Optional[ClipboardEntry]:
        pass

    @abstractmethod
    def get(self, entry_id: str) -> Optional[ClipboardEntry]:
        pass

    @abstractmethod
    def upsert(self, entry: ClipboardEntry) -> ClipboardEntry:
        pass

    @abstractmethod
    def list_all(self) -> List[ClipboardEntry]:
        pass

    def count(self) -> int:
        return len(self.list_all())

    def close(self) -> None:
        pass

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
