"""Custom exceptions for cliphistory."""

import time
from typing import Optional


class ClipHistoryError(Exception):
    """Base exception class for cliphistory."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error
        self.timestamp = time.time()

    def __str__(self):
        base_msg = super().__str__()
        if self.original_error:
            return f"{base_msg} (Caused by: {type(self.original_error).__name__}: {self.original_error})"
        return base_msg


class StoreError(ClipHistoryError):
    """A single store query or write failed."""
    pass


class DuplicateContentError(StoreError):
    """An upsert would leave two entries with the same content."""
    pass


class EntryNotFound(ClipHistoryError):
    """An action referenced an entry id the store does not hold."""

    def __init__(self, entry_id: str):
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id


class ClipboardError(ClipHistoryError):
    """Reading from or writing to the system clipboard failed."""
    pass
