from datetime import datetime
import threading
import time

import pytest

from cliphistory.clipboard import InMemoryClipboard
from cliphistory.database import InMemoryStore
from cliphistory.exceptions import EntryNotFound, StoreError
from cliphistory.services import HistoryEngine


class FlakyStore(InMemoryStore):
    def __init__(self):
        super().__init__()
        self.failing = False
        self.attempts = 0

    def find_by_content(self, content):
        self.attempts += 1
        if self.failing:
            raise StoreError("down")
        return super().find_by_content(content)


def contents(store):
    return sorted(e.content for e in store.list_all())


def test_first_observation_creates_entry(store, observe):
    entry = observe("A")

    assert entry is not None
    assert entry.content == "A"
    assert entry.is_favourite is False
    assert entry.entry_id.startswith("e_")
    assert contents(store) == ["A"]


def test_unchanged_clipboard_is_a_noop(store, engine, observe):
    first = observe("A")

    assert engine.on_tick() is None
    assert store.get(first.entry_id).timestamp == first.timestamp


@pytest.mark.parametrize("text", [None, ""])
def test_empty_clipboard_never_creates_entry(store, observe, text):
    assert observe(text) is None
    assert store.count() == 0


def test_reobserving_touches_instead_of_duplicating(store, observe):
    a = observe("A")
    observe("B")
    again = observe("A")

    assert again.entry_id == a.entry_id
    assert again.timestamp > a.timestamp
    assert contents(store) == ["A", "B"]


def test_no_duplicate_contents_for_any_sequence(store, observe):
    for text in ["A", "B", "A", "C", "C", "B", "A", "D", "A"]:
        observe(text)
        seen = [e.content for e in store.list_all()]
        assert len(seen) == len(set(seen))

    assert contents(store) == ["A", "B", "C", "D"]


def test_timestamp_never_decreases_when_clock_goes_backwards(store, clipboard):
    instants = iter([
        datetime(2024, 1, 1, 12, 0, 0),
        datetime(2024, 1, 1, 11, 0, 0),
        datetime(2024, 1, 1, 10, 0, 0),
    ])
    engine = HistoryEngine(store, clipboard, poll_interval=0.01, suppression_delay=0.05,
                           clock=lambda: next(instants))

    first = engine.upsert_or_touch("A")
    engine.upsert_or_touch("B")
    touched = engine.upsert_or_touch("A")

    assert touched.timestamp >= first.timestamp
    assert touched.timestamp > store.find_by_content("B").timestamp


def test_captures_in_same_instant_still_order(store, clipboard):
    frozen = datetime(2024, 1, 1, 12, 0, 0)
    engine = HistoryEngine(store, clipboard, poll_interval=0.01, suppression_delay=0.05,
                           clock=lambda: frozen)

    a = engine.upsert_or_touch("A")
    b = engine.upsert_or_touch("B")

    assert b.timestamp > a.timestamp


def test_self_write_is_not_captured_within_window(store, engine, clipboard, observe):
    observe("A")
    before = store.find_by_content("A")

    assert engine.write_to_clipboard("X") is True
    assert clipboard.writes == ["X"]
    assert engine.is_suppressing

    assert engine.on_tick() is None
    assert store.find_by_content("X") is None
    assert store.find_by_content("A") == before


def test_external_copy_after_window_is_captured(engine, clipboard, store, wait_for):
    engine.write_to_clipboard("X")
    assert wait_for(lambda: not engine.is_suppressing)

    clipboard.copy("Y")
    captured = engine.on_tick()

    assert captured is not None and captured.content == "Y"
    assert store.find_by_content("X") is None


def test_echo_of_self_write_is_not_captured_after_window(engine, store, wait_for):
    engine.write_to_clipboard("X")
    assert wait_for(lambda: not engine.is_suppressing)

    assert engine.on_tick() is None
    assert store.count() == 0


def test_rewrite_rearms_the_window(store, clipboard):
    engine = HistoryEngine(store, clipboard, poll_interval=0.01, suppression_delay=0.5)
    try:
        engine.write_to_clipboard("X")
        time.sleep(0.3)
        engine.write_to_clipboard("Z")
        time.sleep(0.3)

        # the first window has expired, the second has not
        assert engine.is_suppressing
    finally:
        engine.stop()


def test_failed_write_does_not_leave_suppression_set(engine, clipboard):
    clipboard.fail_writes = True

    assert engine.write_to_clipboard("X") is False
    assert not engine.is_suppressing
    assert engine.last_observed is None


def test_stop_clears_suppression_and_blocks_store_writes(engine, clipboard, store):
    engine.write_to_clipboard("X")
    engine.stop()

    assert not engine.is_suppressing

    clipboard.copy("Y")
    assert engine.on_tick() is None
    assert store.count() == 0


def test_store_failure_is_attempted_once_per_observation(clipboard, clock):
    store = FlakyStore()
    engine = HistoryEngine(store, clipboard, poll_interval=0.01, suppression_delay=0.05, clock=clock)
    store.failing = True

    clipboard.copy("A")
    for _ in range(5):
        assert engine.on_tick() is None
    assert store.attempts == 1
    assert store.count() == 0
    assert engine.last_observed == "A"

    store.failing = False
    assert engine.on_tick() is None

    clipboard.copy("B")
    assert engine.on_tick().content == "B"
    assert contents(store) == ["B"]


def test_clipboard_read_failure_is_swallowed(engine, clipboard, store):
    clipboard.copy("A")
    clipboard.fail_reads = True

    assert engine.on_tick() is None
    assert store.count() == 0


def test_toggle_favourite_keeps_timestamp(engine, observe):
    entry = observe("A")

    toggled = engine.toggle_favourite(entry.entry_id)

    assert toggled.is_favourite is True
    assert toggled.timestamp == entry.timestamp
    assert engine.toggle_favourite(entry.entry_id).is_favourite is False


def test_remove_favourite_is_one_directional(engine, observe):
    entry = observe("A")

    assert engine.remove_favourite(entry.entry_id) is None
    assert engine.store.get(entry.entry_id).is_favourite is False

    engine.toggle_favourite(entry.entry_id)
    removed = engine.remove_favourite(entry.entry_id)
    assert removed.is_favourite is False


def test_move_to_top_advances_timestamp(engine, observe):
    a = observe("A")
    observe("B")

    moved = engine.move_to_top(a.entry_id)

    assert moved.timestamp > engine.store.find_by_content("B").timestamp


@pytest.mark.parametrize("method", ["toggle_favourite", "remove_favourite", "move_to_top"])
def test_unknown_entry_raises(engine, method):
    with pytest.raises(EntryNotFound):
        getattr(engine, method)("e_missing")


def test_mutations_notify_listener(engine, observe, changes):
    entry = observe("A")
    engine.on_tick()
    engine.toggle_favourite(entry.entry_id)
    engine.remove_favourite(entry.entry_id)

    assert changes.calls == 3


def test_listener_errors_do_not_propagate(store, clipboard):
    def broken():
        raise RuntimeError("render failed")

    engine = HistoryEngine(store, clipboard, poll_interval=0.01, suppression_delay=0.05,
                           on_history_changed=broken)

    assert engine.upsert_or_touch("A") is not None


def test_suppression_delay_must_exceed_poll_interval(store, clipboard):
    with pytest.raises(ValueError):
        HistoryEngine(store, clipboard, poll_interval=1.0, suppression_delay=0.5)

    engine = HistoryEngine(store, clipboard, poll_interval=1.0)
    assert engine.suppression_delay == pytest.approx(1.5)


def test_poll_thread_captures_until_stopped(engine, clipboard, store, wait_for):
    engine.start()
    engine.start()
    assert engine.is_running

    clipboard.copy("A")
    assert wait_for(lambda: store.count() == 1)

    engine.stop()
    assert not engine.is_running

    clipboard.copy("B")
    time.sleep(0.05)
    assert contents(store) == ["A"]


def test_poll_loop_survives_unexpected_errors(store, clipboard, wait_for):
    calls = []

    class ExplodingStore(InMemoryStore):
        def find_by_content(self, content):
            calls.append(content)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return super().find_by_content(content)

    exploding = ExplodingStore()
    engine = HistoryEngine(exploding, clipboard, poll_interval=0.01, suppression_delay=0.05)
    clipboard.copy("A")

    with engine:
        assert wait_for(lambda: calls == ["A"])
        clipboard.copy("B")
        assert wait_for(lambda: exploding.count() == 1)

    assert contents(exploding) == ["B"]


def test_restart_after_slow_stop_leaves_one_poller(store, wait_for):
    class SlowClipboard(InMemoryClipboard):
        def __init__(self):
            super().__init__("A")
            self.reading = threading.Event()
            self.release = threading.Event()

        def _read_text(self):
            self.reading.set()
            self.release.wait(5)
            return super()._read_text()

    clipboard = SlowClipboard()
    engine = HistoryEngine(store, clipboard, poll_interval=0.01, suppression_delay=0.05)
    try:
        engine.start()
        assert clipboard.reading.wait(2)
        stuck = engine._poll_thread

        # join gives up while the first poller is still inside a read
        engine.stop()
        assert stuck.is_alive()

        engine.start()
        clipboard.release.set()

        assert wait_for(lambda: not stuck.is_alive())
        assert engine.is_running
    finally:
        clipboard.release.set()
        engine.stop()
