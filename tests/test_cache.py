import json

import pytest
import redis

from jobs.cache import JobCache
from jobs.models import Job

pytestmark = pytest.mark.django_db


def test_set_and_get_round_trip_with_ttl(fake_redis):
    cache = JobCache(client=fake_redis, ttl=60)
    cache.set_with_ttl("jobs:latest:2::::latest", {"page": 2})

    assert cache.get("jobs:latest:2::::latest") == {"page": 2}
    assert 0 < fake_redis.ttl("jobs:latest:2::::latest") <= 60
    assert cache.get("missing") is None


def test_delete_by_pattern_only_touches_matching_keys(fake_redis):
    fake_redis.set("jobs:latest:1::::latest", "x")
    fake_redis.set("jobs:latest:2:서울:::latest", "x")
    fake_redis.set("crawler:alerts:active", "[]")

    deleted = JobCache(client=fake_redis).delete_by_pattern("jobs:latest:*")

    assert deleted == 2
    assert fake_redis.exists("crawler:alerts:active")


def test_refresh_evicts_pages_and_repopulates_canonical_keys(fake_redis):
    for i in range(25):
        Job.objects.create(source="saramin", external_id=str(i), title=f"공고 {i}")
    fake_redis.set("jobs:latest:3:부산:::latest", "stale")

    assert JobCache(client=fake_redis).refresh() is True

    assert not fake_redis.exists("jobs:latest:3:부산:::latest")
    latest = json.loads(fake_redis.get("jobs:latest"))
    assert len(latest) == 25
    first_page = json.loads(fake_redis.get("jobs:latest:1::::latest"))
    assert first_page["total"] == 25
    assert len(first_page["jobs"]) == 20
    assert fake_redis.ttl("jobs:latest") > 0


def test_refresh_failure_is_swallowed():
    class BrokenRedis:
        def scan_iter(self, *args, **kwargs):
            raise redis.ConnectionError("redis down")

    assert JobCache(client=BrokenRedis()).refresh() is False
