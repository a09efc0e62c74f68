from datetime import datetime, timedelta
import time

import pytest

from cliphistory.clipboard import InMemoryClipboard
from cliphistory.database import InMemoryStore
from cliphistory.services import ActionDispatcher, HistoryEngine, SelectionPolicy

POLL_INTERVAL = 0.01
SUPPRESSION_DELAY = 0.05


class FakeClock:
    """Returns a new instant on every call, one second apart."""

    def __init__(self, start: datetime = datetime(2024, 2, 29, 12, 0, 0),
                 step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


class ChangeCounter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def clipboard():
    return InMemoryClipboard()


@pytest.fixture
def changes():
    return ChangeCounter()


@pytest.fixture
def engine(store, clipboard, clock, changes):
    engine = HistoryEngine(
        store,
        clipboard,
        poll_interval=POLL_INTERVAL,
        suppression_delay=SUPPRESSION_DELAY,
        on_history_changed=changes,
        clock=clock,
    )
    yield engine
    engine.stop()


@pytest.fixture
def policy(store):
    return SelectionPolicy(store, recent_limit=10)


@pytest.fixture
def dispatcher(store, engine):
    return ActionDispatcher(store, engine)


@pytest.fixture
def observe(engine, clipboard):
    """Simulate an external copy followed by one poll tick."""
    def _observe(text):
        clipboard.copy(text)
        return engine.on_tick()
    return _observe


@pytest.fixture
def wait_for():
    def _wait_for(predicate, timeout=2.0, interval=0.01):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()
    return _wait_for
