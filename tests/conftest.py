import fakeredis
import pytest

from .helpers import SleepRecorder


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def fake_redis(monkeypatch):
    from jobs import cache as job_cache

    client = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(job_cache, "_client", client)
    return client


@pytest.fixture(autouse=True)
def _fresh_manager(monkeypatch):
    monkeypatch.setattr("jobs.manager._manager", None)
