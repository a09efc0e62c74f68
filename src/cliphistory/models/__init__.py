from cliphistory.models.actions import (
    Action,
    CopyAction,
    RemoveFavouriteAction,
    SourceList,
    ToggleFavouriteAction,
    action_for,
)
from cliphistory.models.entry import ClipboardEntry, new_entry_id

__all__ = [
    'Action',
    'ClipboardEntry',
    'CopyAction',
    'RemoveFavouriteAction',
    'SourceList',
    'ToggleFavouriteAction',
    'action_for',
    'new_entry_id',
]
