from typing import Optional

try:
    from AppKit import NSPasteboard, NSPasteboardTypeString
    HAS_APPKIT = True
except ImportError:
    HAS_APPKIT = False

from cliphistory.clipboard.base import ClipboardPort


class MacOSClipboard(ClipboardPort):

    def _read_text(self) -> Optional[str]:
        if not HAS_APPKIT:
            return None

        pasteboard = NSPasteboard.generalPasteboard()
        # types() is None on an empty pasteboard
        types = pasteboard.types() or []
        if NSPasteboardTypeString not in types:
            return None

        text = pasteboard.stringForType_(NSPasteboardTypeString)
        return str(text) if text else None

    def _write_text(self, text: str) -> bool:
        if not HAS_APPKIT:
            return False

        pasteboard = NSPasteboard.generalPasteboard()
        pasteboard.clearContents()
        return bool(pasteboard.setString_forType_(text, NSPasteboardTypeString))
