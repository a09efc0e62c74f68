from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

import ulid


def new_entry_id() -> str:
    return f"e_{ulid.new()}"


@dataclass(frozen=True)
class ClipboardEntry:
    """Immutable history record; touch and favourite changes return a new value."""
    entry_id: str
    content: str
    timestamp: datetime
    is_favourite: bool = False

    @classmethod
    def create(cls, content: str, timestamp: datetime, entry_id: Optional[str] = None) -> "ClipboardEntry":
        if not content:
            raise ValueError("Clipboard entry content must be non-empty")
        return cls(
            entry_id=entry_id or new_entry_id(),
            content=content,
            timestamp=timestamp,
            is_favourite=False,
        )

    def touched(self, now: datetime) -> "ClipboardEntry":
        # timestamps never move backwards
        return replace(self, timestamp=max(now, self.timestamp))

    def with_favourite(self, is_favourite: bool) -> "ClipboardEntry":
        return replace(self, is_favourite=is_favourite)
