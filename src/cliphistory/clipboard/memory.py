import threading
from typing import List, Optional

from cliphistory.clipboard.base import ClipboardPort


class InMemoryClipboard(ClipboardPort):
    """Process-local clipboard used by tests and headless runs."""

    def __init__(self, text: Optional[str] = None):
        self._lock = threading.Lock()
        self._text = text
        self.writes: List[str] = []
        self.fail_reads = False
        self.fail_writes = False

    def copy(self, text: Optional[str]) -> None:
        """Simulate a copy made by another application."""
        with self._lock:
            self._text = text

    def _read_text(self) -> Optional[str]:
        if self.fail_reads:
            raise OSError("clipboard unavailable")
        with self._lock:
            return self._text

    def _write_text(self, text: str) -> bool:
        if self.fail_writes:
            return False
        with self._lock:
            self._text = text
            self.writes.append(text)
        return True
