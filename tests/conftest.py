from datetime import datetime, timedelta, timezone

import pytest

from term_tutor.models import Term

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


class MemoryStore:
    def __init__(self, progress=None):
        self.progress = dict(progress or {})
        self.loads = 0
        self.saves = 0

    def load(self):
        self.loads += 1
        return dict(self.progress)

    def save(self, progress):
        self.saves += 1
        self.progress = dict(progress)


class MemoryTimer:
    def __init__(self):
        self.calls = []

    def add_elapsed(self, seconds):
        self.calls.append(seconds)


class FakeClock:
    """Callable clock that advances a fixed step on every read."""

    def __init__(self, start=T0, step=timedelta(seconds=10)):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def timer():
    return MemoryTimer()


@pytest.fixture
def clock():
    return FakeClock()


def make_terms(n, chapter_id="ch1"):
    return [
        Term(id=f"{chapter_id}-{i}", chapter_id=chapter_id, term=f"Term {i}", definition=f"Definition {i}")
        for i in range(1, n + 1)
    ]


@pytest.fixture
def terms():
    return make_terms(5)
