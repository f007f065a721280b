"""Shared fixtures: a ticking clock and sequential ids make transitions repeatable."""

from datetime import datetime, timedelta, timezone

import pytest

from surveykit.backends import MemoryBackend
from surveykit.store import SurveyStore


START = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


class TickingClock:
    """Returns START, START+1s, START+2s, ..."""

    def __init__(self, start=START):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class SequentialIds:
    def __init__(self, prefix="id-"):
        self.prefix = prefix
        self.count = 0

    def __call__(self):
        self.count += 1
        return f"{self.prefix}{self.count}"


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend, clock, ids):
    return SurveyStore(backend, clock=clock, new_id=ids)
