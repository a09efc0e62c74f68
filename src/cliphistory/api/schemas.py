from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from cliphistory.models import (
    Action,
    ClipboardEntry,
    CopyAction,
    RemoveFavouriteAction,
    SourceList,
    ToggleFavouriteAction,
)


class Entry(BaseModel):
    entryId: str
    content: str
    timestamp: datetime
    isFavourite: bool

    @classmethod
    def from_entry(cls, entry: ClipboardEntry) -> "Entry":
        return cls(
            entryId=entry.entry_id,
            content=entry.content,
            timestamp=entry.timestamp,
            isFavourite=entry.is_favourite,
        )


class Selection(BaseModel):
    modifierPressed: bool = False
    sourceList: SourceList = SourceList.RECENT


class ActionRequest(BaseModel):
    action: Literal["copy", "toggle_favourite", "remove_favourite"]
    entryId: str

    def to_action(self) -> Action:
        if self.action == "copy":
            return CopyAction(self.entryId)
        if self.action == "toggle_favourite":
            return ToggleFavouriteAction(self.entryId)
        return RemoveFavouriteAction(self.entryId)


class ActionResult(BaseModel):
    ok: bool
    entry: Optional[Entry] = None
