from typing import List, Sequence

from cliphistory.models import ClipboardEntry

MENU_TITLE_LENGTH = 24


def truncate(text: str, length: int = MENU_TITLE_LENGTH, indicator: str = "...") -> str:
    if len(text) <= length:
        return text
    return text[:max(0, length - len(indicator))] + indicator


def _menu_title(entry: ClipboardEntry) -> str:
    # keep each menu row on one line
    return truncate(" ".join(entry.content.split()))


def render_menu(recent: Sequence[ClipboardEntry], favourites: Sequence[ClipboardEntry]) -> str:
    """Render the favourites section, a separator, then the recent list."""
    lines: List[str] = ["Favourites"]
    if favourites:
        lines.extend(f"  * {_menu_title(entry)}" for entry in favourites)
    else:
        lines.append("  (none)")

    lines.append("-" * (MENU_TITLE_LENGTH + 4))

    if recent:
        for index, entry in enumerate(recent, start=1):
            marker = "*" if entry.is_favourite else " "
            lines.append(f"{index:>2}{marker} {_menu_title(entry)}")
    else:
        lines.append("  (history is empty)")

    return "\n".join(lines)
