"""Pytest configuration for the scan scheduler."""
import itertools
import os
import tempfile

import pytest


def pytest_configure():
    # The API module builds its default manager at import time; keep it off the working directory.
    os.environ.setdefault(
        "SENSEI_DATABASE_URL",
        f"sqlite:///{os.path.join(tempfile.mkdtemp(prefix='sensei-'), 'sensei_test.db')}",
    )


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def session_factory(tmp_path):
    from engine.db import make_session_factory
    return make_session_factory(f"sqlite:///{tmp_path / 'store.db'}")


@pytest.fixture
def store(session_factory):
    from engine.errors import PersistenceFailure
    from engine.store import PersistentStore

    class SwitchableStore(PersistentStore):
        fail_writes = False
        fail_keys = ()

        def set(self, key, value):
            if self.fail_writes or key in self.fail_keys:
                raise PersistenceFailure(f"Failed to write '{key}'", details={"key": key})
            super().set(key, value)

    return SwitchableStore(session_factory)


@pytest.fixture
def make_manager(store, clock, id_factory):
    from engine.job_manager import JobManager

    def _make(**kwargs):
        kwargs.setdefault("store", store)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("id_factory", id_factory)
        kwargs.setdefault("scan_duration", 1.2)
        return JobManager(**kwargs)

    return _make


@pytest.fixture
def manager(make_manager):
    return make_manager()
