"""
Cross-platform plain-text clipboard access.

Every platform adapter implements ``ClipboardPort``; the history engine only
ever talks to that interface.
"""

from cliphistory.clipboard.base import ClipboardPort
from cliphistory.clipboard.factory import get_clipboard, get_clipboard_class
from cliphistory.clipboard.memory import InMemoryClipboard

__all__ = [
    'ClipboardPort',
    'InMemoryClipboard',
    'get_clipboard',
    'get_clipboard_class',
]
