"""Tagged user actions produced by the presentation layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class SourceList(str, Enum):
    RECENT = "recent"
    FAVOURITES = "favourites"


@dataclass(frozen=True)
class CopyAction:
    entry_id: str


@dataclass(frozen=True)
class ToggleFavouriteAction:
    entry_id: str


@dataclass(frozen=True)
class RemoveFavouriteAction:
    """Favourite -> not favourite only; never re-adds."""
    entry_id: str


Action = Union[CopyAction, ToggleFavouriteAction, RemoveFavouriteAction]


def action_for(entry_id: str, modifier_pressed: bool, source_list: SourceList) -> Action:
    """Translate a menu click into the action it stands for.

    A plain click copies the entry back to the clipboard. With the modifier
    held, a click in the recent list flips the favourite flag while a click in
    the favourites list removes the entry from favourites.
    """
    if not modifier_pressed:
        return CopyAction(entry_id)
    if SourceList(source_list) is SourceList.FAVOURITES:
        return RemoveFavouriteAction(entry_id)
    return ToggleFavouriteAction(entry_id)
