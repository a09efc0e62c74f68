import time
from typing import Optional

import win32clipboard as wc

from cliphistory.clipboard.base import ClipboardPort


class WindowsClipboard(ClipboardPort):

    def _open(self) -> bool:
        for _ in range(3):
            try:
                wc.OpenClipboard()
                return True
            except Exception:
                time.sleep(0.05)
        return False

    def _read_text(self) -> Optional[str]:
        opened = self._open()
        if not opened:
            return None

        try:
            if wc.IsClipboardFormatAvailable(wc.CF_UNICODETEXT):
                try:
                    return wc.GetClipboardData(wc.CF_UNICODETEXT)
                except Exception:
                    return None
            return None
        finally:
            try:
                wc.CloseClipboard()
            except Exception:
                pass

    def _write_text(self, text: str) -> bool:
        if not self._open():
            return False

        try:
            wc.EmptyClipboard()
            wc.SetClipboardData(wc.CF_UNICODETEXT, text)
            return True
        finally:
            try:
                wc.CloseClipboard()
            except Exception:
                pass
