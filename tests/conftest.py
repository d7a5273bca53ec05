"""
pytest configuration and shared fixtures.

Tests never start the real refresh thread or touch the network:
  1. Broadcasters get a fake timer that records how often it was armed.
  2. Query caches get a no-op sleep so retry backoff does not slow tests down.
  3. The location store lives in pytest's tmp_path.
"""

import os
import random
import threading
from datetime import datetime

import pytest
import pytz

# Set env vars BEFORE importing backend modules so config picks them up
os.environ.setdefault("SERIES_TIMEZONE", "UTC")
os.environ.setdefault("SELECTED_LOCATION_FILE", os.path.join("/tmp", "aq-dashboard-test-location.json"))


class FakeTimer:
    """Stands in for run_schedule: records calls and hands out stop events."""

    def __init__(self):
        self.calls = []
        self.events = []

    def __call__(self, job, seconds, name="job"):
        stop_event = threading.Event()
        self.calls.append((job, seconds, name))
        self.events.append(stop_event)
        return stop_event


class StubRandom:
    """random.Random replacement returning a fixed cycle of values."""

    def __init__(self, *values):
        self.values = list(values) or [0.5]
        self.index = 0

    def random(self):
        value = self.values[self.index % len(self.values)]
        self.index += 1
        return value


async def no_sleep(_seconds):
    return None


@pytest.fixture()
def fixed_now():
    return datetime(2025, 3, 10, 14, 30, tzinfo=pytz.utc)


@pytest.fixture()
def rng():
    return random.Random(42)


@pytest.fixture()
def fake_timer():
    return FakeTimer()


@pytest.fixture()
def new_york():
    from backend.models import Coordinate

    return Coordinate(lat=40.7128, lon=-74.0060)


@pytest.fixture()
def store(tmp_path):
    from backend.preferences import LocationStore

    return LocationStore(str(tmp_path / "selected_location.json"))


@pytest.fixture()
def broadcaster(fake_timer, store, fixed_now):
    from backend.broadcaster import SeriesBroadcaster

    series_broadcaster = SeriesBroadcaster(refresh_seconds=30, location_store=store, rng=random.Random(7),
                                           clock=lambda: fixed_now, timer=fake_timer)
    yield series_broadcaster
    series_broadcaster.dispose()


@pytest.fixture()
def query_cache():
    from backend.query_cache import QueryCache

    return QueryCache(sleep=no_sleep)
