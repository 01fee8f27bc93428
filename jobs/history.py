import json
import logging
from datetime import datetime

import redis
from django.conf import settings

from .cache import REDIS_KEYS, get_redis

logger = logging.getLogger(__name__)


class JobHistory:
    """
    큐 작업 결과 보관 (capped list).
    완료 100건 / 최종 실패 1000건까지만 남긴다.
    """

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        return self._client if self._client is not None else get_redis()

    def _push(self, key, limit, entry):
        entry.setdefault("finished_at", datetime.now().isoformat(timespec="seconds"))
        try:
            pipe = self.client.pipeline()
            pipe.lpush(key, json.dumps(entry, ensure_ascii=False, default=str))
            pipe.ltrim(key, 0, limit - 1)
            pipe.execute()
        except redis.RedisError as e:
            logger.warning("job history write failed (key=%s, %s)", key, e)

    def record_completed(self, entry):
        self._push(REDIS_KEYS["completed"], settings.CRAWL_QUEUE_KEEP_COMPLETED, dict(entry))

    def record_failed(self, entry):
        self._push(REDIS_KEYS["failed"], settings.CRAWL_QUEUE_KEEP_FAILED, dict(entry))

    def _read(self, key, limit):
        try:
            raw = self.client.lrange(key, 0, limit - 1)
        except redis.RedisError as e:
            logger.warning("job history read failed (key=%s, %s)", key, e)
            return []
        result = []
        for item in raw:
            try:
                result.append(json.loads(item))
            except ValueError:
                continue
        return result

    def completed(self, limit=20):
        return self._read(REDIS_KEYS["completed"], limit)

    def failed(self, limit=20):
        return self._read(REDIS_KEYS["failed"], limit)

    def counts(self):
        try:
            return {
                "completed": self.client.llen(REDIS_KEYS["completed"]),
                "failed": self.client.llen(REDIS_KEYS["failed"]),
            }
        except redis.RedisError as e:
            logger.warning("job history count failed (%s)", e)
            return {"completed": 0, "failed": 0}
