import logging
from abc import ABC, abstractmethod
from typing import Optional

from cliphistory.exceptions import ClipboardError

logger = logging.getLogger(__name__)


class ClipboardPort(ABC):
    """Plain-text access to the system clipboard."""

    @abstractmethod
    def _read_text(self) -> Optional[str]:
        pass

    @abstractmethod
    def _write_text(self, text: str) -> bool:
        pass

    def read_text(self) -> Optional[str]:
        try:
            text = self._read_text()
        except ClipboardError:
            raise
        except Exception as e:
            raise ClipboardError("Failed to read clipboard", original_error=e) from e
        return text or None

    def write_text(self, text: str) -> bool:
        try:
            return bool(self._write_text(text))
        except Exception as e:
            logger.error(f"Failed to write clipboard: {e}")
            return False
