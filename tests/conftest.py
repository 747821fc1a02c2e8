"""Shared test fixtures and configuration.

Sets up environment variables before any tidyquest imports so the settings
singleton never points at a real database or community backend, and
provides common fixtures like a temp store and a controllable clock.
"""

import os

# Patch env vars BEFORE any tidyquest imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("INSTANT_APP_ID", "")
os.environ.setdefault("INSTANT_ADMIN_TOKEN", "")

import random
from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_quest(quest_id, title=None, category="daily", frequency=None, duration=10, steps=3, room=None):
    """Build a Quest with `steps` numbered steps."""
    from tidyquest.data.models import Quest, QuestStep

    return Quest(
        id=quest_id,
        title=title or quest_id.replace("-", " ").title(),
        category=category,
        frequency=frequency or ("weekly" if category == "weekly" else "daily"),
        duration=duration,
        steps=[QuestStep(id=f"s{i}", instruction=f"Step {i}") for i in range(1, steps + 1)],
        room=room,
    )


# Monday 19 October 2026, 09:00 UTC
MONDAY = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FakeClock(MONDAY)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_tidyquest.db")


@pytest.fixture
def kv_store(tmp_db_path):
    """Return a SQLiteKeyValueStore backed by a temp file."""
    from tidyquest.adapters.sqlite_store import SQLiteKeyValueStore
    return SQLiteKeyValueStore(db_path=tmp_db_path)


@pytest.fixture
def storage(kv_store):
    """Return a QuestStorage over the temp store."""
    from tidyquest.data.storage import QuestStorage
    return QuestStorage(kv_store)


@pytest.fixture
def catalog():
    """Small catalog covering daily, weekday and special categories."""
    from tidyquest.data.catalog import QuestCatalog

    return QuestCatalog([
        make_quest("morning-dishes", "Morning Dishes", duration=10),
        make_quest("night-reset", "Night Reset", duration=15),
        make_quest("monday-kitchen", "Monday Kitchen Reset", category="weekly", duration=20, room="kitchen"),
        make_quest("tuesday-bath", "Tuesday Bathroom Refresh", category="weekly", duration=20, room="bathroom"),
        make_quest("wednesday-floors", "Wednesday Floors", category="weekly", duration=25),
        make_quest("thursday-bed", "Thursday Bedroom Reset", category="weekly", duration=20, room="bedroom"),
        make_quest("friday-fridge", "Friday Fridge Clear-Out", category="weekly", duration=15, room="kitchen"),
        make_quest("five-min-tidy", "Five-Minute Tidy", category="speedClean", frequency="adhoc", duration=5, steps=2),
        make_quest("deep-bath", "Bathroom Deep Clean", category="deepClean", frequency="monthly", duration=45, steps=4, room="bathroom"),
    ])
