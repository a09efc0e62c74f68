"""Clipboard history engine.

Polls the system clipboard on a background thread and folds every new text
into the store: unseen content creates an entry, known content is touched so it
moves back to the top. Text the engine writes itself is suppressed for a short
window so the echo of a copy-back is never captured as a new observation.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from cliphistory.clipboard import ClipboardPort
from cliphistory.config import DEFAULT_POLL_INTERVAL
from cliphistory.database import Store
from cliphistory.exceptions import ClipboardError, EntryNotFound, StoreError
from cliphistory.models import ClipboardEntry

logger = logging.getLogger(__name__)

_MIN_STEP = timedelta(microseconds=1)


class HistoryEngine:

    def __init__(
        self,
        store: Store,
        clipboard: ClipboardPort,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        suppression_delay: Optional[float] = None,
        on_history_changed: Optional[Callable[[], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        auto_start: bool = False,
    ) -> None:
        """Initialise the engine.

        Args:
            store: Storage the engine upserts into.
            clipboard: Port used to read and write clipboard text.
            poll_interval: Seconds between clipboard checks.
            suppression_delay: Seconds a self-write stays suppressed. Defaults
                to one and a half poll intervals and must exceed one.
            on_history_changed: Called with no arguments after every mutation.
            clock: Source of "now"; defaults to ``datetime.now``.
            auto_start: When ``True`` polling starts immediately.
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if suppression_delay is None:
            suppression_delay = poll_interval * 1.5
        if suppression_delay <= poll_interval:
            raise ValueError("suppression_delay must exceed poll_interval")

        self.store = store
        self.clipboard = clipboard
        self.poll_interval = poll_interval
        self.suppression_delay = suppression_delay
        self._on_history_changed = on_history_changed or self._default_handler
        self._clock = clock or datetime.now

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False
        self._stopped = False

        self._suppressing = False
        self._suppression_timer: Optional[threading.Timer] = None
        self._last_observed: Optional[str] = None
        self._last_timestamp: Optional[datetime] = None

        if auto_start:
            self.start()

    # ---------------------------------------------------------------------
    # Lifecycle management
    # ---------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_suppressing(self) -> bool:
        return self._suppressing

    @property
    def last_observed(self) -> Optional[str]:
        return self._last_observed

    def start(self) -> None:
        with self._lock:
            if self._is_running:
                logger.debug("HistoryEngine already running")
                return

            logger.info("Starting HistoryEngine polling (interval=%ss)", self.poll_interval)
            self._stopped = False
            # a thread that outlived its join keeps its own, already set, event
            self._stop_event = threading.Event()
            self._is_running = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop, args=(self._stop_event,),
                name="HistoryEngine", daemon=True)
            self._poll_thread.start()

    def stop(self) -> None:
        """Stop polling and drop any pending suppression window.

        Ticks arriving after this call never reach the store.
        """
        with self._lock:
            self._stopped = True
            self._cancel_suppression()
            if not self._is_running:
                return

            logger.info("Stopping HistoryEngine polling")
            self._is_running = False
            self._stop_event.set()
            thread = self._poll_thread
            self._poll_thread = None

        # join outside the lock, the loop may be waiting on it
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(1.0, self.poll_interval * 2))

    def run_forever(self) -> None:
        try:
            if not self._is_running:
                self.start()

            while not self._stop_event.wait(timeout=self.poll_interval):
                continue
        except KeyboardInterrupt:
            logger.info("HistoryEngine interrupted by user")
        finally:
            self.stop()

    def _poll_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.poll_interval):
            try:
                self.on_tick()
            except Exception:
                logger.exception("Unexpected error during clipboard poll")

    # ---------------------------------------------------------------------
    # Capture
    # ---------------------------------------------------------------------
    def on_tick(self) -> Optional[ClipboardEntry]:
        """Check the clipboard once; returns the captured entry, if any."""
        if self._stopped or self._suppressing:
            logger.debug("Tick skipped (stopped=%s, suppressing=%s)", self._stopped, self._suppressing)
            return None

        try:
            text = self.clipboard.read_text()
        except ClipboardError as e:
            logger.error(f"Clipboard read failed: {e}")
            return None

        if not text:
            return None

        with self._lock:
            # a self-write or stop may have landed while reading
            if self._stopped or self._suppressing:
                return None
            if text == self._last_observed:
                return None
            # one attempt per observation, a failed save is not retried
            self._last_observed = text
            return self.upsert_or_touch(text)

    def upsert_or_touch(self, content: str) -> Optional[ClipboardEntry]:
        """Create an entry for unseen content or refresh the existing one.

        Returns the stored entry, or ``None`` when the store failed; a failure
        leaves the store untouched.
        """
        if not content:
            return None

        with self._lock:
            try:
                existing = self.store.find_by_content(content)
                now = self._next_timestamp()
                if existing is not None:
                    entry = existing.touched(now)
                else:
                    entry = ClipboardEntry.create(content, now)
                stored = self.store.upsert(entry)
            except StoreError as e:
                logger.error(f"Error saving clipboard content: {e}")
                return None

            self._last_observed = content

        if existing is not None:
            logger.info("Existing item %s, updated timestamp", stored.entry_id)
        else:
            logger.info("New clipboard item %s saved", stored.entry_id)
        self._notify()
        return stored

    # ---------------------------------------------------------------------
    # Self-writes
    # ---------------------------------------------------------------------
    def write_to_clipboard(self, content: str) -> bool:
        """Put ``content`` on the clipboard without re-capturing it."""
        with self._lock:
            previous = self._last_observed
            self._cancel_suppression()
            self._suppressing = True
            self._last_observed = content

            if not self.clipboard.write_text(content):
                logger.error("Failed to copy content to clipboard")
                self._suppressing = False
                self._last_observed = previous
                return False

            timer = threading.Timer(self.suppression_delay, self._end_suppression)
            timer.daemon = True
            self._suppression_timer = timer
            timer.start()

        logger.info("Copied %d characters to clipboard", len(content))
        return True

    def _end_suppression(self) -> None:
        with self._lock:
            self._suppressing = False
            self._suppression_timer = None
        logger.debug("Self-write suppression cleared")

    def _cancel_suppression(self) -> None:
        if self._suppression_timer is not None:
            self._suppression_timer.cancel()
            self._suppression_timer = None
        self._suppressing = False

    # ---------------------------------------------------------------------
    # User mutations
    # ---------------------------------------------------------------------
    def move_to_top(self, entry_id: str) -> Optional[ClipboardEntry]:
        return self._mutate(entry_id, lambda entry: entry.touched(self._next_timestamp()))

    def toggle_favourite(self, entry_id: str) -> Optional[ClipboardEntry]:
        return self._mutate(entry_id, lambda entry: entry.with_favourite(not entry.is_favourite))

    def remove_favourite(self, entry_id: str) -> Optional[ClipboardEntry]:
        """Unmark a favourite; an entry that is not a favourite is left alone."""
        def unmark(entry: ClipboardEntry) -> Optional[ClipboardEntry]:
            if not entry.is_favourite:
                logger.debug("Entry %s is not a favourite, nothing to remove", entry.entry_id)
                return None
            return entry.with_favourite(False)

        return self._mutate(entry_id, unmark)

    def _mutate(
        self,
        entry_id: str,
        change: Callable[[ClipboardEntry], Optional[ClipboardEntry]],
    ) -> Optional[ClipboardEntry]:
        with self._lock:
            try:
                entry = self.store.get(entry_id)
            except StoreError as e:
                logger.error(f"Failed to load entry {entry_id}: {e}")
                return None

            if entry is None:
                raise EntryNotFound(entry_id)

            updated = change(entry)
            if updated is None:
                return None

            try:
                stored = self.store.upsert(updated)
            except StoreError as e:
                logger.error(f"Failed to update entry {entry_id}: {e}")
                return None

        logger.info(
            "Entry %s updated (favourite=%s)", stored.entry_id, stored.is_favourite)
        self._notify()
        return stored

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + _MIN_STEP
        self._last_timestamp = now
        return now

    def _notify(self) -> None:
        try:
            self._on_history_changed()
        except Exception:
            logger.exception("Error while calling on_history_changed")

    @staticmethod
    def _default_handler() -> None:
        pass

    def __enter__(self) -> "HistoryEngine":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
