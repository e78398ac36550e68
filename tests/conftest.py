"""Shared fixtures."""

from datetime import datetime

import pytest

from fakes import FakeCache, FakeClock, RecordingSleep


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def cache_file(tmp_path):
    return tmp_path / "cache" / "valuations.json"
