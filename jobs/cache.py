"""
Redis 캐시 계층.

- jobs:latest              최근 공고 100건
- jobs:latest:<page>:...   목록 페이지 캐시 (필터 조합별)
- crawler:alerts:active    활성 알림 (monitoring)

크롤 성공 후 refresh() 로 목록 캐시를 비우고 대표 키 두 개를 다시 채운다.
캐시는 best-effort: 실패해도 로그만 남기고 크롤 결과에는 영향 없음.
"""
import json
import logging

import redis
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError

from .models import Job

logger = logging.getLogger(__name__)

REDIS_KEYS = {
    "latest": "jobs:latest",
    "latest_pattern": "jobs:latest:*",
    "first_page": "jobs:latest:1::::latest",
    "alerts": "crawler:alerts:active",
    "lock": "crawl:lock:{source}:{page}",
    "completed": "crawler:jobs:completed",
    "failed": "crawler:jobs:failed",
}

LATEST_LIMIT = 100
PAGE_SIZE = 20

LIST_FIELDS = (
    "id",
    "source",
    "external_id",
    "title",
    "company",
    "location",
    "salary_range",
    "employment_type",
    "is_disability_friendly",
    "crawled_at",
    "expires_at",
    "external_url",
)

_client = None


def get_redis():
    """프로세스당 하나의 클라이언트 (settings.REDIS_URL)."""
    global _client
    if _client is None:
        _client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _client


def _dumps(value):
    return json.dumps(value, cls=DjangoJSONEncoder, ensure_ascii=False)


def _safe_json_loads(val):
    if val is None:
        return None
    try:
        return json.loads(val)
    except (TypeError, ValueError):
        return None


class JobCache:
    def __init__(self, client=None, ttl=None):
        self._client = client
        self.ttl = ttl or settings.CRAWL_CACHE_TTL

    @property
    def client(self):
        return self._client if self._client is not None else get_redis()

    def get(self, key):
        return _safe_json_loads(self.client.get(key))

    def set_with_ttl(self, key, value, ttl=None):
        self.client.set(key, _dumps(value), ex=ttl or self.ttl)

    def delete_by_pattern(self, pattern):
        # KEYS 대신 SCAN (운영 redis 블로킹 방지)
        keys = list(self.client.scan_iter(match=pattern, count=500))
        if keys:
            self.client.delete(*keys)
        return len(keys)

    def refresh(self):
        """
        목록 캐시 무효화 후 재생성.
        실패는 삼키고 False 반환 (크롤 실패로 올리지 않는다).
        """
        try:
            deleted = self.delete_by_pattern(REDIS_KEYS["latest_pattern"])

            latest = list(
                Job.objects.order_by("-crawled_at").values(*LIST_FIELDS)[:LATEST_LIMIT]
            )
            self.set_with_ttl(REDIS_KEYS["latest"], latest)

            first_page = {
                "jobs": latest[:PAGE_SIZE],
                "total": Job.objects.count(),
                "page": 1,
                "limit": PAGE_SIZE,
            }
            self.set_with_ttl(REDIS_KEYS["first_page"], first_page)
        except (redis.RedisError, DatabaseError) as e:
            logger.warning("cache refresh failed (%s)", e)
            return False

        logger.info("cache refreshed (evicted=%s, latest=%s)", deleted, len(latest))
        return True
